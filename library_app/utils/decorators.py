from functools import wraps

from flask_jwt_extended import get_jwt, verify_jwt_in_request

from library_app.errors import ForbiddenError


def role_required(*roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = (get_jwt() or {}).get("role")
            if role not in roles:
                raise ForbiddenError(
                    "Insufficient permissions to access this resource",
                    details={"userRole": role, "requiredRoles": list(roles)},
                )
            return fn(*args, **kwargs)
        return wrapper
    return decorator
