from herbmarket.config import Config
from herbmarket.storage import KeyValueStore


class AppTestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    STORAGE_BACKEND = 'database'
    DEMO_MODE = True
    DEMO_DATA_AUTO_INIT = False


class BrokenStore(KeyValueStore):
    """Every backend call fails, like a disabled or full storage area."""

    def _get(self, key):
        raise OSError('storage disabled')

    def _set(self, key, value):
        raise OSError('quota exceeded')

    def _remove(self, key):
        raise OSError('storage disabled')

    def _keys(self):
        raise OSError('storage disabled')


def seller_record(seller_id='seller@herbs.cn', business_name='云南三七合作社'):
    return {
        'id': seller_id,
        'email': seller_id,
        'business_name': business_name,
        'role': 'seller',
        'created_at': '2024-01-01T00:00:00Z',
    }


def buyer_record(buyer_id='buyer@demo.com', business_name='北京中医药贸易公司'):
    return {
        'id': buyer_id,
        'email': buyer_id,
        'business_name': business_name,
        'role': 'buyer',
        'created_at': '2024-01-01T00:00:00Z',
    }
