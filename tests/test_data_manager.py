import json
import unittest

from herbmarket.services.cart_service import Cart
from herbmarket.services.data_manager import (
    AUTO_APPROVED_NOTE,
    CURRENT_DATA_VERSION,
    DemoDataManager,
)
from herbmarket.services.seed_data import ADMIN_EMAIL, ADMIN_USER_ID
from herbmarket.storage import MemoryStore, StorageKeys
from tests.helpers import seller_record


def _snapshot(store):
    return {key: store.get(key) for key in store.keys()}


def _seller_product(product_id, price=45.0, seller=None):
    seller = seller or seller_record()
    return {
        'id': product_id,
        'name_cn': '三七',
        'price': price,
        'stock': 10,
        'seller_id': seller['id'],
        'created_at': '2024-01-01T00:00:00Z',
        'updated_at': '2024-01-01T00:00:00Z',
        'seller': {
            'business_name': seller['business_name'],
            'id': seller['id'],
        },
    }


class InitializeTests(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.manager = DemoDataManager(self.store)
        self.repos = self.manager.repos

    def test_seeds_reference_data(self):
        self.assertTrue(self.manager.initialize())

        products = self.repos.products.get_all()
        self.assertEqual(len(products), 20)
        self.assertEqual(products[0]['name_cn'], '当归')
        self.assertEqual(products[0]['price'], 45.0)
        self.assertTrue(
            all(p['audit_status'] == 'approved' for p in products))

        activities = self.repos.group_buys.get_all()
        self.assertEqual(len(activities), 1)
        self.assertEqual(activities[0]['status'], 'active')

        roles = sorted(u['role'] for u in self.repos.users.get_all())
        self.assertEqual(roles, ['admin', 'buyer', 'seller'])
        self.assertEqual(self.repos.get_version(), CURRENT_DATA_VERSION)

    def test_second_run_changes_nothing(self):
        self.manager.initialize()
        first = _snapshot(self.store)

        self.assertFalse(self.manager.initialize())
        self.assertEqual(_snapshot(self.store), first)

    def test_existing_catalog_is_kept(self):
        self.repos.products.set_all([{'id': 99, 'name_cn': '自定义'}])
        self.manager.initialize()
        self.assertEqual(
            self.repos.products.get_all(), [{'id': 99, 'name_cn': '自定义'}])

    def test_old_version_stamp_replays_steps(self):
        self.repos.set_version('0.9.0')
        self.assertTrue(self.manager.initialize())
        self.assertEqual(len(self.repos.products.get_all()), 20)
        self.assertEqual(self.repos.get_version(), CURRENT_DATA_VERSION)

    def test_outside_demo_mode_does_nothing(self):
        manager = DemoDataManager(self.store, demo_mode=False)
        self.assertFalse(manager.initialize())
        self.assertEqual(self.store.keys(), [])


class UserMigrationTests(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.manager = DemoDataManager(self.store)
        self.repos = self.manager.repos

    def _admins(self):
        return [u for u in self.repos.users.get_all() if u['role'] == 'admin']

    def test_legacy_users_are_merged_and_removed(self):
        self.repos.users.set_all([{
            'id': 'demo-buyer-1',
            'email': 'buyer@demo.com',
            'business_name': '北京中医药贸易公司',
            'role': 'buyer',
            'created_at': '2024-01-01T00:00:00Z',
        }])
        self.store.set(StorageKeys.LEGACY_USERS, json.dumps([
            {'id': 'demo-buyer-1', 'business_name': 'dup', 'role': 'buyer'},
            {'id': 'old@herbs.cn', 'business_name': '老字号药行',
             'role': 'seller', 'created_at': '2023-05-01T00:00:00Z'},
        ]))
        self.store.set(StorageKeys.LEGACY_CURRENT_USER, json.dumps(
            {'id': 'old@herbs.cn', 'business_name': '老字号药行',
             'role': 'seller'}))

        self.manager.initialize()

        users = {u['id']: u for u in self.repos.users.get_all()}
        self.assertEqual(users['demo-buyer-1']['business_name'],
                         '北京中医药贸易公司')
        self.assertEqual(users['old@herbs.cn']['email'], 'old@herbs.cn')
        self.assertEqual(len(self._admins()), 1)
        self.assertEqual(self._admins()[0]['id'], ADMIN_USER_ID)
        self.assertEqual(self._admins()[0]['email'], ADMIN_EMAIL)
        self.assertEqual(self.repos.current_user.get()['id'], 'old@herbs.cn')
        self.assertIsNone(self.store.get(StorageKeys.LEGACY_USERS))
        self.assertIsNone(self.store.get(StorageKeys.LEGACY_CURRENT_USER))

    def test_existing_current_user_is_not_replaced(self):
        self.repos.current_user.set({'id': 'demo-buyer-1', 'role': 'buyer'})
        self.store.set(StorageKeys.LEGACY_CURRENT_USER, json.dumps(
            {'id': 'old@herbs.cn', 'role': 'seller'}))
        self.manager.initialize()
        self.assertEqual(self.repos.current_user.get()['id'], 'demo-buyer-1')
        self.assertIsNone(self.store.get(StorageKeys.LEGACY_CURRENT_USER))

    def test_already_migrated_users_keep_single_admin(self):
        self.manager.initialize()
        self.repos.set_version('0.1.0')
        self.manager.initialize()
        self.assertEqual(len(self._admins()), 1)

    def test_malformed_legacy_data_is_logged(self):
        self.store.set(StorageKeys.LEGACY_USERS, 'not json')
        with self.assertLogs(
                'herbmarket.services.data_manager', level='ERROR'):
            self.manager.initialize()
        self.assertEqual(len(self.repos.users.get_all()), 3)
        self.assertEqual(len(self._admins()), 1)


class VisibilityTests(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.manager = DemoDataManager(self.store)
        self.manager.initialize()
        self.repos = self.manager.repos

    def _visible_ids(self):
        return {str(p['id']) for p in self.manager.visible_products()}

    def test_catalog_is_always_visible(self):
        ids = self._visible_ids()
        self.assertEqual(ids, {str(i) for i in range(1, 21)})

    def test_legacy_seller_products_are_backfilled(self):
        self.repos.seller_products.set_all([_seller_product(1700000000000)])

        self.assertIn('1700000000000', self._visible_ids())
        reviews = self.repos.product_reviews.get_all()
        self.assertEqual(len(reviews), 1)
        self.assertEqual(reviews[0]['status'], 'approved')
        self.assertEqual(reviews[0]['admin_notes'], AUTO_APPROVED_NOTE)
        self.assertEqual(reviews[0]['original_price'], 45.0)
        self.assertEqual(reviews[0]['product_id'], '1700000000000')

        self.assertEqual(self.manager.backfill_reviews(), 0)

    def test_pending_and_rejected_products_are_hidden(self):
        self.repos.seller_products.set_all([
            _seller_product('p-pending'),
            _seller_product('p-rejected'),
        ])
        self.repos.product_reviews.set_all([
            {'id': 'r1', 'product_id': 'p-pending',
             'status': 'pending_review'},
            {'id': 'r2', 'product_id': 'p-rejected', 'status': 'rejected'},
        ])
        ids = self._visible_ids()
        self.assertNotIn('p-pending', ids)
        self.assertNotIn('p-rejected', ids)
        self.assertEqual(len(ids), 20)

        all_ids = {
            str(p['id'])
            for p in self.manager.all_products_including_pending()}
        self.assertIn('p-pending', all_ids)
        self.assertIn('p-rejected', all_ids)

    def test_update_product_prefers_catalog(self):
        self.assertTrue(self.manager.update_product(3, {'price': 30.0}))
        self.assertEqual(self.manager.find_product('3')['price'], 30.0)
        self.assertFalse(self.manager.update_product('missing', {}))


class BackupTests(unittest.TestCase):

    def setUp(self):
        self.store = MemoryStore()
        self.manager = DemoDataManager(self.store)
        self.manager.initialize()

    def test_export_then_import_restores_data(self):
        self.manager.repos.buying_requests.set_all([{'id': 'br-1'}])
        backup = self.manager.export_data()

        self.manager.clear_all()
        self.assertEqual(self.store.keys(), [])

        self.assertTrue(self.manager.import_data(backup))
        self.assertEqual(len(self.manager.repos.products.get_all()), 20)
        self.assertEqual(
            self.manager.repos.buying_requests.get_all(), [{'id': 'br-1'}])
        self.assertEqual(
            self.manager.repos.get_version(), CURRENT_DATA_VERSION)

    def test_clear_all_removes_every_cart(self):
        Cart(self.store, 'browser-1').add_item('1', '当归', 45.0, 1)
        Cart(self.store).add_item('1', '当归', 45.0, 1)
        self.store.set('unrelated', 'x')

        self.manager.clear_all()

        self.assertEqual(self.store.keys(), ['unrelated'])

    def test_invalid_backup_is_rejected(self):
        with self.assertLogs(
                'herbmarket.services.data_manager', level='ERROR'):
            self.assertFalse(self.manager.import_data('{broken'))
        self.assertEqual(len(self.manager.repos.products.get_all()), 20)


if __name__ == '__main__':
    unittest.main()
