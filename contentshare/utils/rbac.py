from functools import wraps

from ..errors import Forbidden
from .identity import current_subject

def roles_required(*allowed_roles):
    """
    Restrict an endpoint to specific roles.
    Use with @authenticate above it.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if current_subject().role not in allowed_roles:
                raise Forbidden("Insufficient permissions")
            return fn(*args, **kwargs)
        return wrapper
    return decorator
