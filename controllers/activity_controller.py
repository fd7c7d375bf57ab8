from flask import Blueprint, request, g
from datetime import datetime
from pymongo import ReturnDocument

from models.activity import Activity, USERS
from models.permission import VIEW_LIST, VIEW_DETAILS, CREATE, EDIT, DELETE
from schemas import ActivityCreateSchema, ActivityUpdateSchema, ActivityStatusSchema
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.helpers import to_object_id
from utils.pagination import paginate, get_sort_args, regex
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

activities_bp = Blueprint("activities", __name__, url_prefix="/api/v1/activity")

SORTABLE = {"createdAt", "updatedAt", "name", "status"}


@activities_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, USERS)
@validate_schema(ActivityCreateSchema)
def create_activity():
    body = g.body

    if Activity.collection().find_one({"name": body["name"]}):
        raise ApiError(400, response_message.already_exists("Activity"))

    activity = Activity(createdBy=current_user_id(), **body).to_dict()
    Activity.collection().insert_one(activity)

    return send_success(response_message.created("Activity"), 201, activity)


@activities_bp.route("", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, USERS)
def view_activities():
    query = {}
    if request.args.get("name"):
        query["name"] = regex(request.args["name"])

    payload = paginate(
        Activity.collection(), query, request.args,
        sort=get_sort_args(request.args, SORTABLE), default_limit=10,
    )
    return send_success("Activities fetched successfully", 200, payload)


@activities_bp.route("/<activity_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, USERS)
def get_activity(activity_id):
    activity = Activity.collection().find_one({"_id": to_object_id(activity_id)})
    if not activity:
        raise ApiError(404, response_message.not_found("Activity"))
    return send_success(response_message.fetched("Activity"), 200, activity)


@activities_bp.route("/<activity_id>", methods=["PUT"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(ActivityUpdateSchema, partial=True)
def edit_activity(activity_id):
    oid = to_object_id(activity_id)
    body = g.body

    if body.get("name") and Activity.collection().find_one({"name": body["name"], "_id": {"$ne": oid}}):
        raise ApiError(400, response_message.already_exists("Activity"))

    activity = Activity.collection().find_one_and_update(
        {"_id": oid},
        {"$set": {**body, "updatedBy": current_user_id(), "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not activity:
        raise ApiError(404, response_message.not_found("Activity"))
    return send_success(response_message.updated("Activity"), 200, activity)


@activities_bp.route("/<activity_id>/status", methods=["PATCH"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(ActivityStatusSchema)
def update_activity_status(activity_id):
    activity = Activity.collection().find_one_and_update(
        {"_id": to_object_id(activity_id)},
        {"$set": {"status": g.body["status"], "updatedBy": current_user_id(), "updatedAt": datetime.utcnow()}},
        return_document=ReturnDocument.AFTER,
    )
    if not activity:
        raise ApiError(404, response_message.not_found("Activity"))
    return send_success(response_message.status_updated("Activity"), 200, activity)


@activities_bp.route("/<activity_id>", methods=["DELETE"])
@authenticate_user
@authorize_user(DELETE, USERS)
def delete_activity(activity_id):
    result = Activity.collection().delete_one({"_id": to_object_id(activity_id)})
    if result.deleted_count == 0:
        raise ApiError(404, response_message.not_found("Activity"))
    return send_success(response_message.deleted("Activity"), 200, None)
