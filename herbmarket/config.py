import os
from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_BACKEND_URL = 'https://your-project-id.supabase.co'


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or (
        'dev-secret-key-change-in-production'
    )
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or (
        'sqlite:///herbmarket.db'
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Hosted backend. Demo mode is on while this is unset or still the
    # placeholder from the sample env file.
    BACKEND_URL = os.environ.get('BACKEND_URL', '')

    # Where demo data lives: 'database', 'memory' or 'none'.
    STORAGE_BACKEND = os.environ.get('STORAGE_BACKEND', 'database')

    # Seed and migrate demo data when the app is created.
    DEMO_DATA_AUTO_INIT = (
        os.environ.get('DEMO_DATA_AUTO_INIT', 'true').lower() == 'true'
    )

    LOG_FILE = os.environ.get('LOG_FILE', 'herbmarket.log')


def is_demo_mode(backend_url) -> bool:
    return not backend_url or backend_url == PLACEHOLDER_BACKEND_URL
