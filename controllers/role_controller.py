from flask import Blueprint, request, g
from datetime import datetime
from pymongo import ReturnDocument

from models.roles import Role, ADMIN_ROLE
from models.activity import USERS
from models.permission import VIEW_LIST, VIEW_DETAILS, CREATE, EDIT, DELETE
from schemas import RoleCreateSchema, RoleUpdateSchema, StatusUpdateSchema
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.helpers import to_object_id
from utils.pagination import paginate, get_sort_args, regex, parse_bool
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

roles_bp = Blueprint("roles", __name__, url_prefix="/api/v1/role")

SORTABLE = {"createdAt", "updatedAt", "name", "status"}


# -----------------------------
# CREATE ROLE
# -----------------------------
@roles_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, USERS)
@validate_schema(RoleCreateSchema)
def create_role():
    body = g.body

    if Role.collection().find_one({"name": body["name"]}):
        raise ApiError(400, response_message.already_exists("Role"))

    role = Role(createdBy=current_user_id(), **body).to_dict()
    role["_id"] = Role.collection().insert_one(role).inserted_id

    return send_success(response_message.created("Role"), 201, role)


# -----------------------------
# VIEW ROLES (pagination + search)
# -----------------------------
@roles_bp.route("", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, USERS)
def view_roles():
    query = {}
    if request.args.get("name"):
        query["name"] = regex(request.args["name"])
    is_active = parse_bool(request.args.get("isActive"))
    if is_active is not None:
        query["isActive"] = is_active

    payload = paginate(Role.collection(), query, request.args, sort=get_sort_args(request.args, SORTABLE))
    return send_success("Roles fetched successfully", 200, payload)


@roles_bp.route("/<role_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, USERS)
def get_role(role_id):
    role = Role.collection().find_one({"_id": to_object_id(role_id)})
    if not role:
        raise ApiError(404, response_message.not_found("Role"))
    return send_success(response_message.fetched("Role"), 200, role)


# -----------------------------
# EDIT ROLE
# -----------------------------
@roles_bp.route("/<role_id>", methods=["PUT"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(RoleUpdateSchema, partial=True)
def edit_role(role_id):
    oid = to_object_id(role_id)
    body = g.body

    if body.get("name") and Role.collection().find_one({"name": body["name"], "_id": {"$ne": oid}}):
        raise ApiError(400, response_message.already_exists("Role"))
    if "status" in body:
        body["isActive"] = body["status"] == "Active"

    role = Role.collection().find_one_and_update(
        {"_id": oid},
        {"$set": {**body, "updatedBy": current_user_id(), "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not role:
        raise ApiError(404, response_message.not_found("Role"))
    return send_success(response_message.updated("Role"), 200, role)


@roles_bp.route("/<role_id>/status", methods=["PATCH"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(StatusUpdateSchema)
def update_role_status(role_id):
    status = g.body["status"]
    role = Role.collection().find_one_and_update(
        {"_id": to_object_id(role_id)},
        {"$set": {
            "status": status,
            "isActive": status == "Active",
            "updatedBy": current_user_id(),
            "updatedAt": datetime.utcnow(),
        }},
        return_document=ReturnDocument.AFTER,
    )
    if not role:
        raise ApiError(404, response_message.not_found("Role"))
    return send_success(response_message.status_updated("Role"), 200, role)


# -----------------------------
# DELETE ROLE
# -----------------------------
@roles_bp.route("/<role_id>", methods=["DELETE"])
@authenticate_user
@authorize_user(DELETE, USERS)
def delete_role(role_id):
    role = Role.collection().find_one({"_id": to_object_id(role_id)})

    if not role:
        raise ApiError(404, response_message.not_found("Role"))

    if role["name"] == ADMIN_ROLE:
        raise ApiError(400, "Admin role cannot be deleted")

    Role.collection().delete_one({"_id": role["_id"]})
    return send_success(response_message.deleted("Role"), 200, None)
