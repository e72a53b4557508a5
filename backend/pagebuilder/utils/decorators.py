from functools import wraps
from flask import g, jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity

def current_user(fn):
    """
    Exposes the token identity as g.current_user_id.
    Must sit below @jwt_required().
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.current_user_id = str(get_jwt_identity())
        return fn(*args, **kwargs)
    return wrapper

def roles_required(*allowed_roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            claims = get_jwt()

            if claims.get("role") not in allowed_roles:
                return jsonify({"error": "ACCESS_DENIED", "message": "Insufficient permissions"}), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator
