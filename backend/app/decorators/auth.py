from functools import wraps
from flask_jwt_extended import verify_jwt_in_request, get_jwt
from app.errors import ForbiddenError


def require_roles(*roles: str):
    """Require a valid access token; with roles given, the token's role must be one of them."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = get_jwt().get('role')
            if roles and role not in roles:
                raise ForbiddenError(required_role=sorted(roles), actor_role=role)
            return fn(*args, **kwargs)
        return wrapper
    return outer


require_auth = require_roles()
