from flask import Blueprint, g
from bson import ObjectId
from bson.errors import InvalidId
from datetime import datetime
import jwt
import logging

from models.users import User, PUBLIC_PROJECTION
from models.roles import Role
from schemas import LoginSchema, RefreshTokenSchema, ForgotPasswordSchema, ResetPasswordSchema, VerifyUserSchema
from utils.abac import resolve_role_permissions
from utils.auth import (
    authenticate_user, bearer_token, current_user_id, decode_token, generate_tokens,
)
from utils.db import mongo
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

auth_bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")

logger = logging.getLogger("sevak.auth")

LINK_EXPIRED = "Link is invalid or expired"


def _public(user):
    return {k: v for k, v in user.items() if k not in PUBLIC_PROJECTION}


def _role_name(role_id):
    role = Role.collection().find_one({"_id": role_id}, {"name": 1}) if role_id else None
    return role["name"] if role else None


def _user_id_from_link(token):
    """User id carried by a verify / reset link token."""
    try:
        return ObjectId(decode_token(token, "JWT_VERIFY_SECRET_KEY")["id"])
    except (jwt.InvalidTokenError, InvalidId, KeyError, TypeError):
        raise ApiError(401, LINK_EXPIRED)


# -----------------------------
# LOGIN
# -----------------------------
@auth_bp.route("/login", methods=["POST"])
@validate_schema(LoginSchema)
def login():
    user = User.find_by_email(g.body["email"])
    if not user:
        raise ApiError(401, "Invalid credentials")
    if not user.get("isActive"):
        raise ApiError(401, "User is not active")

    if not User.verify_password(g.body["email"], g.body["password"]):
        logger.warning("Failed login for %s", user["email"])
        raise ApiError(401, "Invalid credentials")

    role_name = _role_name(user.get("roleId"))
    tokens = generate_tokens(user, role_name)
    User.set_refresh_token(user["_id"], tokens["refreshToken"])

    data = {
        "token": tokens,
        "user": _public(user),
        "role": {"_id": user.get("roleId"), "name": role_name},
        "permissions": resolve_role_permissions(mongo.db, user.get("roleId")),
    }
    logger.info("User %s logged in", user["email"])
    return send_success("Login successful", 200, data)


# -----------------------------
# REFRESH ACCESS TOKEN
# -----------------------------
@auth_bp.route("/refresh-token", methods=["POST"])
@validate_schema(RefreshTokenSchema)
def refresh_token():
    incoming = g.body["refreshToken"]
    try:
        user_id = ObjectId(decode_token(incoming, "JWT_REFRESH_TOKEN_SECRET_KEY")["id"])
    except (jwt.InvalidTokenError, InvalidId, KeyError, TypeError):
        raise ApiError(400, "Token is expired")

    user = User.find_by_id(user_id)
    # only the latest issued refresh token is accepted
    if not user or user.get("refreshToken") != incoming:
        raise ApiError(401, "Invalid or expired refresh token")

    tokens = generate_tokens(user, _role_name(user.get("roleId")))
    User.set_refresh_token(user_id, tokens["refreshToken"])
    return send_success("Access token refreshed", 200, tokens)


# -----------------------------
# LOGOUT
# -----------------------------
@auth_bp.route("/logout", methods=["POST"])
def logout():
    token = bearer_token()
    if not token:
        raise ApiError(400, "Token missing in request")

    try:
        user_id = decode_token(token)["id"]
        User.set_refresh_token(user_id, None)
    except (jwt.InvalidTokenError, InvalidId, KeyError, TypeError):
        # an expired session still logs out cleanly
        logger.info("Logout with invalid token")

    return send_success("Logout successful", 200, None)


# -----------------------------
# FORGOT / RESET PASSWORD
# -----------------------------
@auth_bp.route("/forgot-password", methods=["POST"])
@validate_schema(ForgotPasswordSchema)
def forgot_password():
    user = User.collection().find_one({"email": g.body["email"].lower(), "isVerified": True}, {"_id": 1})
    if not user:
        raise ApiError(400, "Invalid Email")

    # no mail integration yet; the request is only acknowledged
    logger.info("Password reset requested for user %s", user["_id"])
    return send_success("Reset Password email sent successfully", 200, None)


@auth_bp.route("/reset-password", methods=["POST"])
@validate_schema(ResetPasswordSchema)
def reset_password():
    user_id = _user_id_from_link(g.body["token"])

    result = User.collection().update_one(
        {"_id": user_id},
        {"$set": {
            "password": User.hash_password(g.body["password"]),
            "refreshToken": None,
            "updatedAt": datetime.utcnow(),
        }},
    )
    if result.matched_count == 0:
        raise ApiError(404, response_message.not_found("User"))
    return send_success("Password reset successfully", 200, None)


@auth_bp.route("/verify", methods=["POST"])
@validate_schema(VerifyUserSchema)
def verify_user():
    user_id = _user_id_from_link(g.body["token"])

    result = User.collection().update_one(
        {"_id": user_id}, {"$set": {"isVerified": True, "updatedAt": datetime.utcnow()}}
    )
    if result.matched_count == 0:
        raise ApiError(404, response_message.not_found("User"))
    return send_success("User verified successfully", 200, None)


# -----------------------------
# PROFILE
# -----------------------------
@auth_bp.route("/profile", methods=["GET"])
@authenticate_user
def view_profile():
    user = User.collection().find_one({"_id": current_user_id()}, PUBLIC_PROJECTION)
    if not user:
        raise ApiError(404, response_message.not_found("User"))

    user["role"] = {"_id": user.get("roleId"), "name": _role_name(user.get("roleId"))}
    return send_success(response_message.fetched("Profile"), 200, user)
