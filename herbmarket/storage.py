"""Key-value storage behind the demo data layer.

Every store exposes ``get``/``set``/``remove`` over string keys and string
values. None of them ever raises: a failing backend is logged and the call
degrades to a no-op, with reads returning ``None``. Callers therefore see an
empty namespace rather than an exception when storage is unavailable.
"""
from herbmarket.extensions import db
from herbmarket.models import StoredValue
import logging

logger = logging.getLogger(__name__)


class StorageKeys:
    PRODUCTS = 'demo_products'
    SELLER_PRODUCTS = 'demo_seller_products'
    ORDERS = 'demo_orders'
    USERS = 'demo_users'
    CURRENT_USER = 'demo_current_user'
    GROUP_BUY_ACTIVITIES = 'demo_group_buy_activities'
    BUYING_REQUESTS = 'demo_buying_requests'
    SELLER_RESPONSES = 'demo_seller_responses'
    ADMIN_PRODUCT_REVIEWS = 'demo_admin_product_reviews'
    CART = 'cart'
    DATA_VERSION = 'demo_data_version'

    # Written by the auth helpers before users moved into demo_users.
    LEGACY_USERS = 'auth_demo_users'
    LEGACY_CURRENT_USER = 'auth_demo_current_user'

    @classmethod
    def all(cls):
        return [
            cls.PRODUCTS,
            cls.SELLER_PRODUCTS,
            cls.ORDERS,
            cls.USERS,
            cls.CURRENT_USER,
            cls.GROUP_BUY_ACTIVITIES,
            cls.BUYING_REQUESTS,
            cls.SELLER_RESPONSES,
            cls.ADMIN_PRODUCT_REVIEWS,
            cls.CART,
            cls.DATA_VERSION,
        ]

    @classmethod
    def cart_for(cls, owner=None):
        """Key of one client's cart; the bare ``cart`` key when unscoped."""
        return f'{cls.CART}:{owner}' if owner else cls.CART

    @classmethod
    def is_cart(cls, key):
        return key == cls.CART or key.startswith(f'{cls.CART}:')


class KeyValueStore:
    """Base store. Subclasses implement the underscored hooks."""

    def get(self, key):
        try:
            return self._get(key)
        except Exception as e:
            logger.error(
                f"Error reading storage key {key}: {e}", exc_info=True)
            self._on_error()
            return None

    def set(self, key, value):
        try:
            self._set(key, value)
        except Exception as e:
            logger.error(
                f"Error writing storage key {key}: {e}", exc_info=True)
            self._on_error()

    def remove(self, key):
        try:
            self._remove(key)
        except Exception as e:
            logger.error(
                f"Error removing storage key {key}: {e}", exc_info=True)
            self._on_error()

    def keys(self):
        try:
            return sorted(self._keys())
        except Exception as e:
            logger.error(f"Error listing storage keys: {e}", exc_info=True)
            self._on_error()
            return []

    def _get(self, key):
        raise NotImplementedError

    def _set(self, key, value):
        raise NotImplementedError

    def _remove(self, key):
        raise NotImplementedError

    def _keys(self):
        raise NotImplementedError

    def _on_error(self):
        return None


class MemoryStore(KeyValueStore):

    def __init__(self, initial=None):
        self._data = dict(initial or {})

    def _get(self, key):
        return self._data.get(key)

    def _set(self, key, value):
        self._data[key] = str(value)

    def _remove(self, key):
        self._data.pop(key, None)

    def _keys(self):
        return list(self._data)


class NullStore(KeyValueStore):
    """Storage is unavailable: reads are empty and writes are dropped."""

    def _get(self, key):
        return None

    def _set(self, key, value):
        return None

    def _remove(self, key):
        return None

    def _keys(self):
        return []


class DatabaseStore(KeyValueStore):
    """Stores each key as a row of ``stored_values``.

    Needs an application context. Outside one, or before the table has been
    migrated, every call degrades like any other storage failure.
    """

    def _get(self, key):
        entry = db.session.get(StoredValue, key)
        return entry.value if entry else None

    def _set(self, key, value):
        entry = db.session.get(StoredValue, key)
        if entry:
            entry.value = str(value)
        else:
            db.session.add(StoredValue(key=key, value=str(value)))
        db.session.commit()

    def _remove(self, key):
        entry = db.session.get(StoredValue, key)
        if entry:
            db.session.delete(entry)
            db.session.commit()

    def _keys(self):
        return [row.key for row in StoredValue.query.all()]

    def _on_error(self):
        try:
            db.session.rollback()
        except Exception:
            logger.warning("Session rollback failed after storage error")


STORE_BACKENDS = {
    'database': DatabaseStore,
    'memory': MemoryStore,
    'none': NullStore,
}


def build_store(config):
    backend = (config.get('STORAGE_BACKEND') or 'database').lower()
    store_class = STORE_BACKENDS.get(backend)
    if store_class is None:
        logger.warning(
            "Unknown STORAGE_BACKEND %s, falling back to memory", backend)
        store_class = MemoryStore
    return store_class()
