from flask import Flask
from flask_migrate import Migrate
from flask_login import LoginManager
from herbmarket.extensions import db
from herbmarket.config import Config, is_demo_mode
from herbmarket.middleware import setup_auth_middleware
import logging
import os

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(os.environ.get('LOG_FILE', 'herbmarket.log')),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

migrate = Migrate()
login_manager = LoginManager()
login_manager.login_message = 'Please log in to access this page.'


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.config.setdefault(
        'DEMO_MODE', is_demo_mode(app.config.get('BACKEND_URL')))
    app.json.ensure_ascii = False

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    from herbmarket.storage import build_store
    app.extensions['herbmarket_store'] = build_store(app.config)

    # Setup user loader
    from herbmarket.models import SessionUser
    from herbmarket.utils import get_data_manager

    @login_manager.user_loader
    def load_user(user_id):
        record = get_data_manager().repos.users.find(user_id)
        return SessionUser(record) if record else None

    # Register blueprints
    from herbmarket.blueprints import (
        admin,
        auth,
        buying_requests,
        cart,
        orders,
        products,
    )

    app.register_blueprint(auth.bp)
    app.register_blueprint(products.bp)
    app.register_blueprint(cart.bp)
    app.register_blueprint(orders.bp)
    app.register_blueprint(buying_requests.bp)
    app.register_blueprint(admin.bp)

    # Setup authentication middleware (login protection for /api/)
    setup_auth_middleware(app)

    # Note: the stored_values table is managed via Flask-Migrate.
    # Use 'flask db upgrade' to create it before the first run.
    if app.config.get('DEMO_DATA_AUTO_INIT'):
        with app.app_context():
            _initialize_demo_data(app)

    logger.info(
        "Flask application initialized (demo mode: %s)",
        app.config['DEMO_MODE'])
    return app


def _initialize_demo_data(app):
    from sqlalchemy import inspect
    from herbmarket.storage import DatabaseStore
    from herbmarket.utils import get_data_manager

    store = app.extensions['herbmarket_store']
    if isinstance(store, DatabaseStore) and \
            not inspect(db.engine).has_table('stored_values'):
        logger.warning(
            "Table stored_values is missing; run 'flask db upgrade' "
            "before demo data can be initialized")
        return
    get_data_manager().initialize()
