"""Demo-mode accounts.

In demo mode the user id is the email address and any password is
accepted; the password argument is only kept so callers look the same as
against the hosted identity provider.

The ``demo_current_user`` pointer describes a single client. The HTTP layer
keeps its sessions in Flask-Login and builds the service with
``track_current_user=False`` so one client's login never replaces another's.
"""
from herbmarket.models import UserRole
from herbmarket.utils import now_iso, same_id
import logging

logger = logging.getLogger(__name__)

SELF_SERVICE_ROLES = (UserRole.BUYER.value, UserRole.SELLER.value)


class AuthError(ValueError):
    pass


class UserAlreadyExistsError(AuthError):
    pass


class UserNotFoundError(AuthError):
    pass


class AuthService:

    def __init__(self, manager, track_current_user=True):
        self.repos = manager.repos
        self.track_current_user = track_current_user

    def get_user(self, user_id):
        return self.repos.users.find(user_id)

    def current_user(self):
        return self.repos.current_user.get()

    def register(self, email, password, role, business_name):
        if role not in SELF_SERVICE_ROLES:
            raise AuthError(f'Cannot register with role {role}')

        users = self.repos.users.get_all()
        if any(same_id(u.get('id'), email) for u in users):
            raise UserAlreadyExistsError('该邮箱已被注册')

        user = {
            'id': email,
            'email': email,
            'business_name': business_name,
            'role': role,
            'created_at': now_iso(),
        }
        users.append(user)
        self.repos.users.set_all(users)
        self._set_current(user)
        logger.info("Registered demo user %s as %s", email, role)
        return user

    def login(self, email, password):
        user = self.get_user(email)
        if user is None:
            # Accounts seeded with an id that differs from the email.
            user = next(
                (u for u in self.repos.users.get_all()
                 if u.get('email') == email),
                None,
            )
        if user is None:
            raise UserNotFoundError('用户不存在')
        self._set_current(user)
        return user

    def logout(self):
        self._set_current(None)

    def _set_current(self, user):
        if self.track_current_user:
            self.repos.current_user.set(user)
