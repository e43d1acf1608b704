from functools import wraps
from typing import Tuple
from flask import abort, g, request, current_app
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from dealergate.constants.roles import context_from_claims, UnknownRoleError
from dealergate.services.policy import RBACService


def current_rbac() -> RBACService:
    """RBACService for the JWT on the current request (cached on ``g``)."""
    rbac = g.get('rbac')
    if rbac is None:
        try:
            ctx = context_from_claims(get_jwt())
        except UnknownRoleError:
            abort(403, description='Unknown role')
        rbac = g.rbac = RBACService(ctx)
    return rbac


def require_report_permission(*grants: Tuple[str, str]):
    """Allow the view when the caller holds any one of the (resource, action) grants."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            rbac = current_rbac()
            if not any(rbac.has_permission(resource, action) for resource, action in grants):
                abort(403, description='Missing permission')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_csrf(fn):
    """Reject the request with 403 unless it carries a token issued by /api/csrf-token."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        token = request.headers.get('x-csrf-token')
        if not token or token not in current_app.extensions.get('csrf_tokens', ()):
            abort(403, description='CSRF token invalid')
        return fn(*args, **kwargs)
    return wrapper
