from flask import request, jsonify
from flask_login import current_user
from functools import wraps
import logging

logger = logging.getLogger(__name__)

# Exact paths that never require login
LOGIN_WHITELIST = (
    '/api/auth/login',
    '/api/auth/register',
    '/api/auth/me',
)

READ_METHODS = ('GET', 'HEAD', 'OPTIONS')


def is_public_browse_path(path: str) -> bool:
    return path.startswith('/api/products') or path == '/api/group-buys'


def is_guest_cart_path(path: str) -> bool:
    # The cart belongs to the browser, not to an account.
    return path == '/api/cart' or path.startswith('/api/cart/')


def requires_login(path: str, method: str) -> bool:
    if not path.startswith('/api/') or path in LOGIN_WHITELIST:
        return False
    if method in READ_METHODS and is_public_browse_path(path):
        return False
    return not is_guest_cart_path(path)


def setup_auth_middleware(app):

    @app.before_request
    def require_login():
        if not requires_login(request.path, request.method.upper()):
            return None
        if current_user.is_authenticated:
            return None
        return jsonify({'error': 'Not logged in',
                        'login_required': True}), 401


def role_required(*allowed_roles):
    """Limit a view to users whose role value is in ``allowed_roles``."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'error': 'Not logged in'}), 401

            role = current_user.role.value
            if role not in allowed_roles:
                logger.warning(
                    "User %s (%s) denied access to %s, needs one of %s",
                    current_user.id,
                    role,
                    request.path,
                    allowed_roles,
                )
                return jsonify({'error': 'Insufficient permissions'}), 403

            return f(*args, **kwargs)
        return wrapper
    return decorator
