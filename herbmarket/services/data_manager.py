"""Lifecycle of the demo data set.

``DemoDataManager`` seeds reference data, runs the versioned migrations,
keeps the review backfill current and computes the buyer-visible catalog.
It is built around an injected key-value store so the same code runs over
the database store in the app and over ``MemoryStore`` in tests.
"""
from herbmarket.models import ReviewStatus, UserRole
from herbmarket.repositories import DemoRepositories
from herbmarket.services import seed_data
from herbmarket.storage import StorageKeys
from herbmarket.utils import new_id, now_iso, same_id
import json
import logging

logger = logging.getLogger(__name__)

CURRENT_DATA_VERSION = '1.0.0'

# Ordered (version, step) pairs. Each step must be idempotent; a store
# stamped with an older version only replays the steps introduced after it.
MIGRATIONS = [
    ('1.0.0', 'seed_catalog'),
    ('1.0.0', 'seed_group_buys'),
    ('1.0.0', 'migrate_users'),
]

AUTO_APPROVED_NOTE = 'auto-approved existing product'


def parse_version(value):
    try:
        return tuple(int(part) for part in str(value).split('.'))
    except (TypeError, ValueError):
        return None


class DemoDataManager:

    def __init__(self, store, demo_mode=True):
        self.store = store
        self.demo_mode = demo_mode
        self.repos = DemoRepositories(store)

    def is_demo_mode(self) -> bool:
        return self.demo_mode

    # ------------------------------------------------------------------
    # Initialization and migrations
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        if not self.demo_mode:
            return False

        stored_version = self.repos.get_version()
        if stored_version == CURRENT_DATA_VERSION:
            return False

        for step in self._pending_steps(stored_version):
            logger.info("Running demo data step %s", step)
            getattr(self, step)()

        self.repos.set_version(CURRENT_DATA_VERSION)
        logger.info(
            "Demo data initialized (from version %s to %s)",
            stored_version,
            CURRENT_DATA_VERSION,
        )
        return True

    def _pending_steps(self, stored_version):
        current = parse_version(CURRENT_DATA_VERSION)
        stored = parse_version(stored_version) if stored_version else None
        if stored is None or stored >= current:
            return [step for _, step in MIGRATIONS]
        return [
            step for version, step in MIGRATIONS
            if parse_version(version) > stored
        ]

    def seed_catalog(self):
        if self.repos.products.is_empty():
            self.repos.products.set_all(seed_data.default_products())

    def seed_group_buys(self):
        if self.repos.group_buys.is_empty():
            self.repos.group_buys.set_all(
                seed_data.default_group_buy_activities())

    def migrate_users(self):
        self._migrate_legacy_users()

        users = self.repos.users.get_all()
        if not users:
            self.repos.users.set_all(seed_data.default_users())
            return

        if not any(u.get('role') == UserRole.ADMIN.value for u in users):
            users.append(seed_data.default_admin())
            self.repos.users.set_all(users)
            logger.info("Added admin user to existing user list")

    def _migrate_legacy_users(self):
        legacy_users = self.store.get(StorageKeys.LEGACY_USERS)
        if legacy_users:
            try:
                parsed = json.loads(legacy_users)
                migrated = [_to_user_record(u) for u in parsed]
                users = self.repos.users.get_all()
                known_ids = {u.get('id') for u in users}
                for user in migrated:
                    if user['id'] not in known_ids:
                        users.append(user)
                        known_ids.add(user['id'])
                self.repos.users.set_all(users)
                self.store.remove(StorageKeys.LEGACY_USERS)
                logger.info(
                    "Migrated %d users from legacy storage", len(migrated))
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                logger.error(f"Error migrating legacy user data: {e}")

        legacy_current = self.store.get(StorageKeys.LEGACY_CURRENT_USER)
        if legacy_current:
            try:
                parsed = json.loads(legacy_current)
                if self.repos.current_user.get() is None:
                    self.repos.current_user.set(_to_user_record(parsed))
                    logger.info("Migrated current user from legacy storage")
                self.store.remove(StorageKeys.LEGACY_CURRENT_USER)
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                logger.error(f"Error migrating legacy current user: {e}")

    def backfill_reviews(self) -> int:
        """Give every seller product without a review an approved one."""
        reviews = self.repos.product_reviews.get_all()
        reviewed_ids = {str(r.get('product_id')) for r in reviews}
        unreviewed = [
            p for p in self.repos.seller_products.get_all()
            if str(p.get('id')) not in reviewed_ids
        ]
        if not unreviewed:
            return 0

        logger.info(
            "Auto-approving %d existing products", len(unreviewed))
        for product in unreviewed:
            timestamp = now_iso()
            reviews.append({
                'id': new_id(),
                'product_id': str(product['id']),
                'seller_id': product.get('seller_id'),
                'original_price': product.get('price'),
                'admin_adjusted_price': product.get('price'),
                'admin_notes': AUTO_APPROVED_NOTE,
                'status': ReviewStatus.APPROVED.value,
                'reviewed_at': timestamp,
                'created_at': timestamp,
                'product': dict(product),
            })
        self.repos.product_reviews.set_all(reviews)
        return len(unreviewed)

    # ------------------------------------------------------------------
    # Product views
    # ------------------------------------------------------------------

    def visible_products(self):
        catalog = self.repos.products.get_all()
        self.backfill_reviews()
        approved_ids = {
            str(r.get('product_id'))
            for r in self.repos.product_reviews.get_all()
            if r.get('status') == ReviewStatus.APPROVED.value
        }
        seller_products = [
            p for p in self.repos.seller_products.get_all()
            if str(p.get('id')) in approved_ids
        ]
        return catalog + seller_products

    def all_products_including_pending(self):
        return (
            self.repos.products.get_all()
            + self.repos.seller_products.get_all()
        )

    def find_product(self, product_id):
        for product in self.all_products_including_pending():
            if same_id(product.get('id'), product_id):
                return product
        return None

    def update_product(self, product_id, changes) -> bool:
        """Apply ``changes`` to the product, catalog first."""
        for collection in (self.repos.products, self.repos.seller_products):
            products = collection.get_all()
            for product in products:
                if same_id(product.get('id'), product_id):
                    product.update(changes)
                    product['updated_at'] = now_iso()
                    collection.set_all(products)
                    return True
        return False

    # ------------------------------------------------------------------
    # Backup and reset
    # ------------------------------------------------------------------

    def clear_all(self):
        carts = [k for k in self.store.keys() if StorageKeys.is_cart(k)]
        for key in StorageKeys.all() + carts:
            self.store.remove(key)

    def export_data(self) -> str:
        data = {
            'version': CURRENT_DATA_VERSION,
            'timestamp': now_iso(),
            'products': self.repos.products.get_all(),
            'seller_products': self.repos.seller_products.get_all(),
            'orders': self.repos.orders.get_all(),
            'users': self.repos.users.get_all(),
            'current_user': self.repos.current_user.get(),
            'group_buy_activities': self.repos.group_buys.get_all(),
            'buying_requests': self.repos.buying_requests.get_all(),
            'seller_responses': self.repos.seller_responses.get_all(),
            'admin_product_reviews': self.repos.product_reviews.get_all(),
        }
        return json.dumps(data, ensure_ascii=False, indent=2)

    def import_data(self, json_data) -> bool:
        try:
            data = json.loads(json_data)
        except (TypeError, ValueError) as e:
            logger.error(f"Error importing demo data: {e}")
            return False
        if not isinstance(data, dict):
            logger.error("Error importing demo data: expected an object")
            return False

        collections = {
            'products': self.repos.products,
            'seller_products': self.repos.seller_products,
            'orders': self.repos.orders,
            'users': self.repos.users,
            'group_buy_activities': self.repos.group_buys,
            'buying_requests': self.repos.buying_requests,
            'seller_responses': self.repos.seller_responses,
            'admin_product_reviews': self.repos.product_reviews,
        }
        for name, collection in collections.items():
            if isinstance(data.get(name), list):
                collection.set_all(data[name])
        if data.get('current_user'):
            self.repos.current_user.set(data['current_user'])

        self.repos.set_version(data.get('version') or CURRENT_DATA_VERSION)
        return True


def _to_user_record(user):
    return {
        'id': user['id'],
        'email': user.get('email') or user['id'],
        'business_name': user.get('business_name'),
        'role': user.get('role'),
        'created_at': user.get('created_at'),
    }
