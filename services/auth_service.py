from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app
from werkzeug.security import check_password_hash

from extensions import db
from models.user import User


def authenticate_user(email: str, password: str):
    user = User.query.filter_by(email=(email or "").strip().lower()).first()

    if not user:
        return None

    if not check_password_hash(user.password_hash, password or ""):
        return None

    if user.is_active is False:
        return None

    return user


def create_token(user: User) -> str:
    # only the subject goes in the token; the role is looked up on every request
    now = datetime.now(timezone.utc)
    ttl = current_app.config["TOKEN_TTL_MINUTES"]
    payload = {
        "sub": user.id,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl)).timestamp()),
    }
    return jwt.encode(payload, current_app.config["SECRET_KEY"], algorithm="HS256")


def user_from_token(token: str):
    if not token:
        return None
    try:
        payload = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
    except jwt.PyJWTError:
        return None

    user = db.session.get(User, payload.get("sub") or "")
    if not user or user.is_active is False:
        return None
    return user
