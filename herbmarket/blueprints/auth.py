from flask import Blueprint, jsonify
from flask_login import (
    login_user,
    logout_user,
    login_required,
    current_user,
)
from herbmarket.models import SessionUser
from herbmarket.services.audit_service import log_audit
from herbmarket.services.auth_service import (
    AuthError,
    AuthService,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from herbmarket.utils import error_response, get_data_manager, json_body
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__)


def _user_payload(record):
    return {
        'id': record['id'],
        'email': record.get('email') or record['id'],
        'business_name': record.get('business_name'),
        'role': record.get('role'),
    }


@bp.route('/api/auth/login', methods=['POST'])
def login():
    data = json_body()
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''

    if not email:
        return error_response('Email cannot be empty')

    auth = AuthService(get_data_manager(), track_current_user=False)
    try:
        user = auth.login(email, password)
    except UserNotFoundError as e:
        log_audit(
            action='LOGIN_FAILED',
            target_type='USER',
            payload={'reason': 'user_not_found'})
        return error_response(str(e), 401)

    login_user(SessionUser(user), remember=True)
    log_audit(
        actor_id=user['id'],
        actor_role=user.get('role'),
        action='LOGIN_SUCCESS',
        target_type='USER',
        target_id=user['id'],
    )
    return jsonify({'ok': True, 'user': _user_payload(user)})


@bp.route('/api/auth/register', methods=['POST'])
def register():
    data = json_body()
    email = (data.get('email') or '').strip()
    password = data.get('password') or ''
    role = (data.get('role') or 'buyer').strip().lower()
    business_name = (data.get('business_name') or '').strip()

    if not email or not password or not business_name:
        return error_response(
            'Email, password and business name cannot be empty')

    auth = AuthService(get_data_manager(), track_current_user=False)
    try:
        user = auth.register(email, password, role, business_name)
    except UserAlreadyExistsError as e:
        return error_response(str(e), 409)
    except AuthError as e:
        return error_response(str(e))

    login_user(SessionUser(user), remember=True)
    log_audit(
        actor_id=user['id'],
        actor_role=user['role'],
        action='REGISTER',
        target_type='USER',
        target_id=user['id'],
    )
    return jsonify({'ok': True, 'user': _user_payload(user)}), 201


@bp.route('/api/auth/logout', methods=['POST'])
@login_required
def logout():
    user_id = current_user.id
    role = current_user.role.value
    logout_user()
    log_audit(
        actor_id=user_id,
        actor_role=role,
        action='LOGOUT',
        target_type='USER',
        target_id=user_id,
    )
    return jsonify({'ok': True})


@bp.route('/api/auth/me', methods=['GET'])
def me():
    if not current_user.is_authenticated:
        return jsonify({'user': None})
    return jsonify({'user': _user_payload(current_user.record)})
