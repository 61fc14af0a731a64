from functools import wraps
from flask import abort
from flask_jwt_extended import verify_jwt_in_request
from admin_console.services.policy import has_capability


def require_capability(module_key: str, capability: str):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if not has_capability(module_key, capability):
                abort(403, description='Missing permission')
            return fn(*args, **kwargs)
        return wrapper
    return outer
