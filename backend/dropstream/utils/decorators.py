from functools import wraps
from flask import g

from dropstream.errors import Forbidden, Unauthorized


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "current_user", None) is None:
            raise Unauthorized("Authentication required")
        return fn(*args, **kwargs)
    return wrapper

def roles_required(*allowed_roles, message="Insufficient permissions"):
    def decorator(fn):
        @wraps(fn)
        @login_required
        def wrapper(*args, **kwargs):
            if g.current_user.platform_role not in allowed_roles:
                raise Forbidden(message)

            return fn(*args, **kwargs)
        return wrapper
    return decorator

admin_required = roles_required("admin", "owner", message="Admin access required")

owner_required = roles_required("owner", message="Only the platform owner can perform this action")
