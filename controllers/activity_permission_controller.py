from flask import Blueprint, g
import logging

from models.activity import Activity, USERS
from models.activity_permission import ActivityPermission
from models.permission import VIEW_DETAILS, EDIT
from models.roles import Role
from schemas import ActivityPermissionAssignSchema
from utils.abac import resolve_role_permissions, normalize_permission_ids
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.db import mongo
from utils.helpers import to_object_id
from utils.pagination import single_page
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

activity_permissions_bp = Blueprint("activity_permissions", __name__, url_prefix="/api/v1/activityPermission")

logger = logging.getLogger("sevak.activity_permission")


# ==========================================================
# ASSIGN ROLE PERMISSIONS TO ACTIVITIES
# ==========================================================
@activity_permissions_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(EDIT, USERS)
@validate_schema(ActivityPermissionAssignSchema)
def assign_activity_permissions():
    role_id = to_object_id(g.body["roleId"], "roleId")

    if not Role.collection().find_one({"_id": role_id}, {"_id": 1}):
        raise ApiError(404, response_message.not_found("Role"))

    # activities without any permission are dropped, not stored empty
    records = [
        ActivityPermission(role_id, act["activityId"], act["permissionIds"], createdBy=current_user_id()).to_dict()
        for act in g.body["activities"]
        if act["permissionIds"]
    ]

    # Replace every mapping of this role
    ActivityPermission.collection().delete_many({"roleId": role_id})
    if records:
        ActivityPermission.collection().insert_many(records)

    logger.info("Role %s now has %d activity mappings", role_id, len(records))
    return send_success(response_message.updated("Permissions"), 200, None)


# ==========================================================
# ROLE PERMISSIONS WITH NAMES
# ==========================================================
@activity_permissions_bp.route("/permission/<role_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, USERS)
def role_permissions(role_id):
    items = resolve_role_permissions(mongo.db, to_object_id(role_id, "roleId"))
    return send_success("Role permissions fetched", 200, single_page(items))


# ==========================================================
# RAW PERMISSION IDS PER ACTIVITY (edit form)
# ==========================================================
@activity_permissions_bp.route("/role/<role_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, USERS)
def activity_permissions_by_role(role_id):
    oid = to_object_id(role_id, "roleId")
    rows = list(ActivityPermission.collection().find({"roleId": oid}).sort("createdAt", -1))

    activity_ids = [row["activityId"] for row in rows]
    activities = {a["_id"]: a for a in Activity.collection().find({"_id": {"$in": activity_ids}})}

    result = {
        "roleId": oid,
        "activities": [
            {
                "id": row["_id"],
                "activityId": row["activityId"] if row["activityId"] in activities else None,
                "status": activities.get(row["activityId"], {}).get("status"),
                "permissionIds": normalize_permission_ids(row.get("permissionIds")),
            }
            for row in rows
        ],
    }
    return send_success(response_message.fetched("Activity permissions"), 200, result)
