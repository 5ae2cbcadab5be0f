"""JSON-backed collections over a key-value store.

Each repository owns exactly one storage key and only supports
whole-collection reads and writes. The helpers (``find``, ``append``) are
read-modify-write sequences on top of those two primitives, so two processes
sharing a store can still lose each other's updates.
"""
from herbmarket.storage import StorageKeys
import json
import logging

logger = logging.getLogger(__name__)


class JsonCollection:

    def __init__(self, store, key):
        self.store = store
        self.key = key

    def get_all(self):
        data = self.store.get(self.key)
        if not data:
            return []
        try:
            items = json.loads(data)
        except ValueError as e:
            logger.error(f"Malformed JSON under key {self.key}: {e}")
            return []
        if not isinstance(items, list):
            logger.error(f"Expected a JSON array under key {self.key}")
            return []
        return items

    def set_all(self, items):
        self.store.set(self.key, json.dumps(list(items), ensure_ascii=False))

    def find(self, record_id):
        record_id = str(record_id)
        for item in self.get_all():
            if str(item.get('id')) == record_id:
                return item
        return None

    def append(self, record):
        items = self.get_all()
        items.append(record)
        self.set_all(items)
        return record

    def is_empty(self):
        return not self.get_all()

    def clear(self):
        self.store.remove(self.key)

    def __repr__(self):
        return f'<JsonCollection {self.key}>'


class JsonDocument:
    """A single JSON object under one key; ``None`` means absent."""

    def __init__(self, store, key):
        self.store = store
        self.key = key

    def get(self):
        data = self.store.get(self.key)
        if not data:
            return None
        try:
            value = json.loads(data)
        except ValueError as e:
            logger.error(f"Malformed JSON under key {self.key}: {e}")
            return None
        return value if isinstance(value, dict) else None

    def set(self, value):
        if value:
            self.store.set(self.key, json.dumps(value, ensure_ascii=False))
        else:
            self.store.remove(self.key)


class DemoRepositories:

    def __init__(self, store):
        self.store = store
        self.products = JsonCollection(store, StorageKeys.PRODUCTS)
        self.seller_products = JsonCollection(
            store, StorageKeys.SELLER_PRODUCTS)
        self.orders = JsonCollection(store, StorageKeys.ORDERS)
        self.users = JsonCollection(store, StorageKeys.USERS)
        self.current_user = JsonDocument(store, StorageKeys.CURRENT_USER)
        self.group_buys = JsonCollection(
            store, StorageKeys.GROUP_BUY_ACTIVITIES)
        self.buying_requests = JsonCollection(
            store, StorageKeys.BUYING_REQUESTS)
        self.seller_responses = JsonCollection(
            store, StorageKeys.SELLER_RESPONSES)
        self.product_reviews = JsonCollection(
            store, StorageKeys.ADMIN_PRODUCT_REVIEWS)

    def get_version(self):
        return self.store.get(StorageKeys.DATA_VERSION)

    def set_version(self, version):
        self.store.set(StorageKeys.DATA_VERSION, version)
