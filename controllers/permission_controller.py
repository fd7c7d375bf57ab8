from flask import Blueprint, request, g
from datetime import datetime
from pymongo import ReturnDocument

from models.permission import Permission, VIEW_LIST, VIEW_DETAILS, CREATE, EDIT, DELETE
from models.activity import USERS
from schemas import PermissionCreateSchema, PermissionUpdateSchema, StatusUpdateSchema
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.helpers import to_object_id
from utils.pagination import paginate, get_sort_args, regex
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

permissions_bp = Blueprint("permissions", __name__, url_prefix="/api/v1/permission")

SORTABLE = {"createdAt", "updatedAt", "name", "status"}


@permissions_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, USERS)
@validate_schema(PermissionCreateSchema)
def create_permission():
    body = g.body

    if Permission.collection().find_one({"name": body["name"]}):
        raise ApiError(400, response_message.already_exists("Permission"))

    permission = Permission(createdBy=current_user_id(), **body).to_dict()
    Permission.collection().insert_one(permission)

    return send_success(response_message.created("Permission"), 201, permission)


@permissions_bp.route("", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, USERS)
def view_permissions():
    query = {}
    name = request.args.get("name")
    if name:
        # search box matches name or description
        query["$or"] = [{"name": regex(name)}, {"description": regex(name)}]
    if request.args.get("status"):
        query["status"] = request.args["status"]

    payload = paginate(
        Permission.collection(), query, request.args,
        sort=get_sort_args(request.args, SORTABLE), default_limit=10,
    )
    return send_success("Permissions fetched successfully", 200, payload)


@permissions_bp.route("/<permission_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, USERS)
def get_permission(permission_id):
    permission = Permission.collection().find_one({"_id": to_object_id(permission_id)})
    if not permission:
        raise ApiError(404, response_message.not_found("Permission"))
    return send_success(response_message.fetched("Permission"), 200, permission)


@permissions_bp.route("/<permission_id>", methods=["PUT"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(PermissionUpdateSchema, partial=True)
def edit_permission(permission_id):
    oid = to_object_id(permission_id)
    body = g.body

    if body.get("name") and Permission.collection().find_one({"name": body["name"], "_id": {"$ne": oid}}):
        raise ApiError(400, response_message.already_exists("Permission"))

    permission = Permission.collection().find_one_and_update(
        {"_id": oid},
        {"$set": {**body, "updatedBy": current_user_id(), "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not permission:
        raise ApiError(404, response_message.not_found("Permission"))
    return send_success(response_message.updated("Permission"), 200, permission)


@permissions_bp.route("/<permission_id>/status", methods=["PATCH"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(StatusUpdateSchema)
def update_permission_status(permission_id):
    permission = Permission.collection().find_one_and_update(
        {"_id": to_object_id(permission_id)},
        {"$set": {"status": g.body["status"], "updatedBy": current_user_id(), "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not permission:
        raise ApiError(404, response_message.not_found("Permission"))
    return send_success(response_message.status_updated("Permission"), 200, permission)


@permissions_bp.route("/<permission_id>", methods=["DELETE"])
@authenticate_user
@authorize_user(DELETE, USERS)
def delete_permission(permission_id):
    result = Permission.collection().delete_one({"_id": to_object_id(permission_id)})
    if result.deleted_count == 0:
        raise ApiError(404, response_message.not_found("Permission"))

    # mapping rows keep the stale id; readers drop ids with no permission
    return send_success(response_message.deleted("Permission"), 200, None)
