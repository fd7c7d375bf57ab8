from flask import Blueprint, request, g
from bson import ObjectId
from datetime import datetime

from models.users import User, PUBLIC_PROJECTION
from models.roles import Role
from models.activity import USERS
from models.permission import VIEW_LIST, VIEW_DETAILS, CREATE, EDIT, DELETE
from schemas import UserCreateSchema, UserUpdateSchema
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.helpers import to_object_id
from utils.pagination import paginate, regex
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

users_bp = Blueprint("users", __name__, url_prefix="/api/v1/user")


def _attach_roles(users):
    """Replace roleId with {"_id", "name"} of the role, like a populate."""
    role_ids = list({u["roleId"] for u in users if u.get("roleId")})
    roles = {r["_id"]: r for r in Role.collection().find({"_id": {"$in": role_ids}}, {"name": 1})}
    for u in users:
        u["role"] = roles.get(u.get("roleId"))
    return users


def _ensure_unique(email=None, mobile=None, exclude_id=None):
    clauses = []
    if email:
        clauses.append({"email": email.lower()})
    if mobile:
        clauses.append({"mobileNumber": mobile})
    if not clauses:
        return

    query = {"$or": clauses}
    if exclude_id:
        query["_id"] = {"$ne": exclude_id}
    if User.collection().find_one(query, {"_id": 1}):
        raise ApiError(400, "Email or Mobile already exists")


# -----------------------------
# ADD USER
# -----------------------------
@users_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, USERS)
@validate_schema(UserCreateSchema)
def add_user():
    body = g.body

    if not Role.collection().find_one({"_id": ObjectId(body["roleId"])}, {"_id": 1}):
        raise ApiError(400, "Invalid roleId")

    # Prevent duplicate users
    _ensure_unique(body["email"], body["mobileNumber"])

    user = User(createdBy=current_user_id(), **body)
    inserted = user.save()

    created = User.find_by_id(inserted.inserted_id, PUBLIC_PROJECTION)
    return send_success(response_message.created("User"), 201, created)


# -----------------------------
# VIEW USERS
# -----------------------------
@users_bp.route("", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, USERS)
def view_users():
    args = request.args
    query = {}

    for field in ("userName", "email", "mobileNumber"):
        if args.get(field):
            query[field] = regex(args[field])

    if args.get("q"):
        query["$or"] = [
            {"userName": regex(args["q"])},
            {"email": regex(args["q"])},
            {"mobileNumber": regex(args["q"])},
        ]

    if args.get("roleId"):
        query["roleId"] = to_object_id(args["roleId"], "roleId")
    elif args.get("roleName"):
        role_ids = [r["_id"] for r in Role.collection().find({"name": regex(args["roleName"])}, {"_id": 1})]
        query["roleId"] = {"$in": role_ids}

    payload = paginate(
        User.collection(), query, args,
        sort=[("createdAt", -1)], projection=PUBLIC_PROJECTION, default_limit=10,
    )
    _attach_roles(payload["items"])
    return send_success("Users fetched successfully", 200, payload)


@users_bp.route("/<user_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, USERS)
def get_user(user_id):
    user = User.collection().find_one({"_id": to_object_id(user_id)}, PUBLIC_PROJECTION)
    if not user:
        raise ApiError(404, response_message.not_found("User"))

    _attach_roles([user])
    return send_success(response_message.fetched("User"), 200, user)


# -----------------------------
# EDIT USER
# -----------------------------
@users_bp.route("/<user_id>", methods=["PUT"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(UserUpdateSchema, partial=True)
def edit_user(user_id):
    oid = to_object_id(user_id)
    if not User.collection().find_one({"_id": oid}, {"_id": 1}):
        raise ApiError(404, response_message.not_found("User"))

    update_data = dict(g.body)
    _ensure_unique(update_data.get("email"), update_data.get("mobileNumber"), exclude_id=oid)

    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()

    if update_data.get("roleId"):
        role_id = ObjectId(update_data["roleId"])
        if not Role.collection().find_one({"_id": role_id}, {"_id": 1}):
            raise ApiError(400, "Invalid roleId")
        update_data["roleId"] = role_id

    # Update password only if provided
    password = update_data.pop("password", None)
    if password:
        update_data["password"] = User.hash_password(password)

    update_data["updatedBy"] = current_user_id()
    update_data["updatedAt"] = datetime.utcnow()
    User.collection().update_one({"_id": oid}, {"$set": update_data})

    updated = User.find_by_id(oid, PUBLIC_PROJECTION)
    return send_success(response_message.updated("User"), 200, updated)


# -----------------------------
# DELETE USER
# -----------------------------
@users_bp.route("/<user_id>", methods=["DELETE"])
@authenticate_user
@authorize_user(DELETE, USERS)
def delete_user(user_id):
    result = User.collection().delete_one({"_id": to_object_id(user_id)})
    if result.deleted_count == 0:
        raise ApiError(404, response_message.not_found("User"))
    return send_success(response_message.deleted("User"), 200, None)
