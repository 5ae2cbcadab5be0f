from flask import current_app, jsonify, request, session
from datetime import datetime
import logging
import uuid

logger = logging.getLogger(__name__)


def now_iso() -> str:
    return datetime.utcnow().isoformat() + 'Z'


def new_id() -> str:
    # uuid1 is time-based but unique, so ids never collide across
    # collections or within the same millisecond.
    return str(uuid.uuid1())


def same_id(left, right) -> bool:
    return left is not None and right is not None and str(left) == str(right)


def get_store():
    return current_app.extensions['herbmarket_store']


def get_data_manager():
    from herbmarket.services.data_manager import DemoDataManager
    return DemoDataManager(
        get_store(),
        demo_mode=current_app.config.get('DEMO_MODE', True),
    )


def get_cart():
    """Cart of the requesting browser.

    The owner id lives in the signed session cookie, so every client gets
    its own cart whether or not it is logged in.
    """
    from herbmarket.services.cart_service import Cart
    cart_id = session.get('cart_id')
    if not cart_id:
        cart_id = session['cart_id'] = new_id()
    return Cart(get_store(), cart_id)


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def error_response(message, status=400):
    return jsonify({'error': message}), status


def parse_positive_number(value, cast=float):
    """Return ``value`` as a positive number, or None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = cast(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None
