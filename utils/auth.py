from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from bson import ObjectId
from bson.errors import InvalidId
from flask import current_app, g, request

from utils.abac import has_permission
from utils.db import mongo
from utils.responses import ApiError


def _encode(payload, secret, lifetime):
    claims = dict(payload)
    claims["exp"] = datetime.now(timezone.utc) + lifetime
    return jwt.encode(claims, secret, algorithm="HS256")


def decode_token(token, secret_key="JWT_TOKEN_SECRET_KEY"):
    # raises jwt.InvalidTokenError (incl. ExpiredSignatureError)
    return jwt.decode(token, current_app.config[secret_key], algorithms=["HS256"])


def generate_tokens(user, role_name=None):
    config = current_app.config
    payload = {
        "id": str(user["_id"]),
        "email": user.get("email"),
        "mobileNumber": user.get("mobileNumber"),
        "roles": role_name,
    }
    access_token = _encode(
        payload, config["JWT_TOKEN_SECRET_KEY"], timedelta(minutes=config["JWT_TOKEN_EXPIRE_MINUTES"])
    )
    refresh_token = _encode(
        {"id": payload["id"]},
        config["JWT_REFRESH_TOKEN_SECRET_KEY"],
        timedelta(days=config["JWT_REFRESH_TOKEN_EXPIRE_DAYS"]),
    )
    return {"accessToken": access_token, "refreshToken": refresh_token}


def generate_verify_token(user_id):
    config = current_app.config
    return _encode(
        {"id": str(user_id)}, config["JWT_VERIFY_SECRET_KEY"], timedelta(hours=config["JWT_VERIFY_EXPIRE_HOURS"])
    )


def bearer_token():
    header = request.headers.get("Authorization", "")
    parts = header.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer" and parts[1].strip():
        return parts[1].strip()
    return None


# This decorator makes sure that only requests with a valid access token get through
def authenticate_user(view_function):
    @wraps(view_function)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            raise ApiError(401, "Access denied. No token provided.")
        try:
            g.user = decode_token(token)
        except jwt.InvalidTokenError:
            raise ApiError(401, "Invalid or expired token")
        return view_function(*args, **kwargs)
    return decorated_function


# Must be stacked below @authenticate_user so g.user is already set
def authorize_user(action, activity_name):
    def decorator(view_function):
        @wraps(view_function)
        def decorated_function(*args, **kwargs):
            if not has_permission(mongo.db, g.get("user"), action, activity_name):
                raise ApiError(403, "Access denied")
            return view_function(*args, **kwargs)
        return decorated_function
    return decorator


def current_user_id():
    """ObjectId of the authenticated user, or None."""
    user = g.get("user") or {}
    if not user.get("id"):
        return None
    try:
        return ObjectId(user.get("id"))
    except (InvalidId, TypeError):
        return None
