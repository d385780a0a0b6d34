from functools import wraps
from flask import abort, current_app
from flask_jwt_extended import verify_jwt_in_request
from backoffice.constants.permissions import VIEW_PAGE
from backoffice.services.catalog import PermissionKey
from backoffice.services.grants import current_principal
from backoffice.services.policy import can_all, can_any, can_view_page


def _guard(check, describe: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            principal = current_principal()
            if not check(principal):
                current_app.logger.debug('Denied %s to user %s (role %s)', describe, principal.id, principal.role.value)
                abort(403, description=f'Missing permission: {describe}')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_permissions(*codes: str):
    """Every code must be allowed."""
    keys = [PermissionKey.parse(c) for c in codes]  # malformed codes fail at import time
    return _guard(lambda p: can_all(p, keys), ', '.join(codes))


def require_any_permission(*codes: str):
    if not codes:
        raise ValueError('require_any_permission needs at least one code')
    keys = [PermissionKey.parse(c) for c in codes]
    return _guard(lambda p: can_any(p, keys), ' or '.join(codes))


def require_page(module: str, menu: str):
    """Route guard for a menu's screen (its ``view_page`` action)."""
    key = PermissionKey(module, menu, VIEW_PAGE)
    return _guard(lambda p: can_view_page(p, module, menu), key.code)
