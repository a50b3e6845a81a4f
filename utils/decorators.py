from functools import wraps
from flask import jsonify
from flask_login import current_user

from services.actor import Actor


def role_required(*roles):
    """Allow the route only for logged-in users whose user_roles row is one of ``roles``."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # 1. Session cookie or bearer token must resolve to a user
            if not current_user.is_authenticated:
                return jsonify({"error": "Unauthorized", "code": "UNAUTHENTICATED"}), 401

            # 2. Role comes from the database, never from the request
            if current_user.role not in roles:
                return jsonify({"error": "Access Denied: You do not have the required role.", "code": "FORBIDDEN"}), 403

            return func(*args, **kwargs)
        return wrapper
    return decorator


def current_actor():
    return Actor.from_user(current_user)
