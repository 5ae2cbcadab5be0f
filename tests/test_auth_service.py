import unittest

from herbmarket.services.auth_service import (
    AuthError,
    AuthService,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from herbmarket.services.data_manager import DemoDataManager
from herbmarket.storage import MemoryStore


class AuthServiceTests(unittest.TestCase):

    def setUp(self):
        self.manager = DemoDataManager(MemoryStore())
        self.manager.initialize()
        self.auth = AuthService(self.manager)

    def test_login_with_any_password(self):
        user = self.auth.login('buyer@demo.com', 'whatever')
        self.assertEqual(user['role'], 'buyer')
        self.assertEqual(self.auth.current_user()['id'], 'buyer@demo.com')

    def test_admin_logs_in_by_email(self):
        user = self.auth.login('admin@platform.com', '')
        self.assertEqual(user['id'], 'demo-admin-1')
        self.assertEqual(user['role'], 'admin')

    def test_unknown_user(self):
        with self.assertRaises(UserNotFoundError):
            self.auth.login('nobody@demo.com', 'x')
        self.assertIsNone(self.auth.current_user())

    def test_register_and_duplicate(self):
        user = self.auth.register(
            'new@herbs.cn', 'pw', 'seller', '亳州药材行')
        self.assertEqual(user['id'], 'new@herbs.cn')
        self.assertEqual(self.auth.get_user('new@herbs.cn')['role'], 'seller')

        with self.assertRaises(UserAlreadyExistsError):
            self.auth.register('new@herbs.cn', 'pw', 'buyer', '其他')

    def test_admin_role_cannot_be_registered(self):
        with self.assertRaises(AuthError):
            self.auth.register('boss@herbs.cn', 'pw', 'admin', '平台')

    def test_logout_clears_current_user(self):
        self.auth.login('seller@demo.com', 'x')
        self.auth.logout()
        self.assertIsNone(self.auth.current_user())

    def test_untracked_login_keeps_pointer(self):
        self.auth.login('buyer@demo.com', 'x')
        untracked = AuthService(self.manager, track_current_user=False)

        untracked.login('seller@demo.com', 'x')
        untracked.logout()

        self.assertEqual(self.auth.current_user()['id'], 'buyer@demo.com')


if __name__ == '__main__':
    unittest.main()
