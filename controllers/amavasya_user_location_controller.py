from flask import Blueprint, request, g
from bson import ObjectId
from datetime import datetime
from pymongo import ReturnDocument
from pymongo.errors import BulkWriteError, DuplicateKeyError
import logging

from models.amavasya import Amavasya
from models.amavasya_user_location import AmavasyaUserLocation
from models.location import Location
from models.users import User
from models.activity import ATTENDANCE, USERS
from models.permission import VIEW_LIST, VIEW_DETAILS, CREATE, EDIT, DELETE
from schemas import AULCreateSchema, AULUpdateSchema, AULBulkCreateSchema
from utils.abac import resolve_role_permissions
from utils.attendance import compute_attendance
from utils.auth import authenticate_user, authorize_user, current_user_id
from utils.db import mongo
from utils.helpers import to_object_id
from utils.pagination import get_pagination_args, make_pagination, paginate, regex, single_page
from utils.responses import ApiError, response_message, send_success
from utils.validation import validate_schema

aul_bp = Blueprint("amavasya_user_location", __name__, url_prefix="/api/v1/amavasyaUserLocation")

logger = logging.getLogger("sevak.attendance")

USER_FIELDS = {"userName": 1, "email": 1, "mobileNumber": 1}
ALREADY_ASSIGNED = "User already assigned to this amavasya"
DUPLICATE_KEY = 11000


# ==========================================================
# HELPERS
# ==========================================================
def _populate(records):
    """Attach amavasya, user and location documents, like a Mongo $lookup."""
    amavasya_ids = list({r["amavasyaId"] for r in records})
    user_ids = list({r["userId"] for r in records})
    location_ids = list({r["locationId"] for r in records})

    amavasyas = {a["_id"]: a for a in Amavasya.collection().find({"_id": {"$in": amavasya_ids}})}
    users = {u["_id"]: u for u in User.collection().find({"_id": {"$in": user_ids}}, USER_FIELDS)}
    locations = {l["_id"]: l for l in Location.collection().find({"_id": {"$in": location_ids}}, {"name": 1})}

    for r in records:
        r["amavasya"] = amavasyas.get(r["amavasyaId"])
        r["user"] = users.get(r["userId"])
        r["location"] = locations.get(r["locationId"])
    return records


def _check_references(amavasya_id, user_id, location_id):
    if amavasya_id and not Amavasya.collection().find_one({"_id": amavasya_id}, {"_id": 1}):
        raise ApiError(404, response_message.not_found("Amavasya"))
    if user_id and not User.collection().find_one({"_id": user_id}, {"_id": 1}):
        raise ApiError(404, response_message.not_found("User"))
    if location_id and not Location.collection().find_one({"_id": location_id}, {"_id": 1}):
        raise ApiError(404, response_message.not_found("Location"))


def _insert_new(entries):
    """Insert assignments, returning how many were stored."""
    if not entries:
        return 0
    try:
        return len(AmavasyaUserLocation.collection().insert_many(entries, ordered=False).inserted_ids)
    except BulkWriteError as exc:
        # users assigned concurrently hit the unique (amavasyaId, userId) index
        if any(err.get("code") != DUPLICATE_KEY for err in exc.details.get("writeErrors", [])):
            raise
        return exc.details.get("nInserted", 0)


def build_user_attendance(user_id, year=None, now=None):
    """
    Attendance of one Sevak over every Amavasya that has already started.
    Events still in the future are only counted as "upcoming".
    """
    now = now or datetime.utcnow()
    oid = to_object_id(user_id, "userId")

    user = User.collection().find_one({"_id": oid}, USER_FIELDS)
    if not user:
        raise ApiError(404, response_message.not_found("User"))

    year_filter = {"year": int(year)} if year else {}
    events = list(
        Amavasya.collection()
        .find({**year_filter, "startDate": {"$lte": now}})
        .sort("startDate", -1)
    )
    upcoming = Amavasya.collection().count_documents({**year_filter, "startDate": {"$gt": now}})

    records = list(AmavasyaUserLocation.collection().find({
        "userId": oid,
        "amavasyaId": {"$in": [e["_id"] for e in events]},
    }))
    location_ids = list({r["locationId"] for r in records if r.get("locationId")})
    location_names = {
        l["_id"]: l.get("name")
        for l in Location.collection().find({"_id": {"$in": location_ids}}, {"name": 1})
    }
    for r in records:
        r["locationName"] = location_names.get(r.get("locationId"))

    result = compute_attendance(events, records)
    result.update({"user": user, "userId": oid, "upcoming": upcoming})
    return result


# ==========================================================
# CREATE
# ==========================================================
@aul_bp.route("", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, ATTENDANCE)
@validate_schema(AULCreateSchema)
def add_assignment():
    body = g.body
    amavasya_id = ObjectId(body["amavasyaId"])
    user_id = ObjectId(body["userId"])
    location_id = ObjectId(body["locationId"])

    _check_references(amavasya_id, user_id, location_id)

    if AmavasyaUserLocation.exists(amavasya_id, user_id):
        raise ApiError(400, ALREADY_ASSIGNED)

    record = AmavasyaUserLocation(
        amavasya_id, user_id, location_id, note=body.get("note"), createdBy=current_user_id()
    ).to_dict()
    try:
        AmavasyaUserLocation.collection().insert_one(record)
    except DuplicateKeyError:
        raise ApiError(400, ALREADY_ASSIGNED)

    return send_success(response_message.created("Relation"), 201, record)


# ==========================================================
# BULK CREATE (same amavasya + location, many users)
# ==========================================================
@aul_bp.route("/bulk", methods=["POST"])
@authenticate_user
@authorize_user(CREATE, ATTENDANCE)
@validate_schema(AULBulkCreateSchema)
def add_bulk_assignments():
    body = g.body
    amavasya_id = ObjectId(body["amavasyaId"])
    location_id = ObjectId(body["locationId"])
    _check_references(amavasya_id, None, location_id)

    # keep request order, drop repeated ids
    user_ids = list(dict.fromkeys(ObjectId(uid) for uid in body["userIds"]))

    existing = {
        r["userId"]
        for r in AmavasyaUserLocation.collection().find(
            {"amavasyaId": amavasya_id, "userId": {"$in": user_ids}}, {"userId": 1}
        )
    }
    new_entries = [
        AmavasyaUserLocation(amavasya_id, uid, location_id, note=body.get("note"), createdBy=current_user_id()).to_dict()
        for uid in user_ids
        if uid not in existing
    ]

    inserted_count = _insert_new(new_entries)
    if inserted_count == 0:
        return send_success(
            "All users already assigned to this amavasya", 200,
            {"inserted": 0, "skipped": len(body["userIds"])},
        )

    logger.info("Bulk assigned %d users to amavasya %s", inserted_count, amavasya_id)

    return send_success(
        "Users assigned to amavasya successfully", 201,
        {"inserted": inserted_count, "skipped": len(body["userIds"]) - inserted_count},
    )


# ==========================================================
# LIST
# ==========================================================
@aul_bp.route("", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, ATTENDANCE)
def view_assignments():
    args = request.args
    query = {}

    for field in ("amavasyaId", "userId", "locationId"):
        if args.get(field):
            query[field] = to_object_id(args[field], field)

    # search by user (name / email / mobile) or location name
    if args.get("q"):
        q = args["q"]
        user_ids = [u["_id"] for u in User.collection().find(
            {"$or": [{"userName": regex(q)}, {"email": regex(q)}, {"mobileNumber": regex(q)}]}, {"_id": 1}
        )]
        location_ids = [l["_id"] for l in Location.collection().find({"name": regex(q)}, {"_id": 1})]
        query["$or"] = [{"userId": {"$in": user_ids}}, {"locationId": {"$in": location_ids}}]

    payload = paginate(AmavasyaUserLocation.collection(), query, args, sort=[("createdAt", -1)], default_limit=10)
    _populate(payload["items"])
    return send_success("Amavasya user locations fetched successfully", 200, payload)


# ==========================================================
# USER WISE LIST (latest amavasya first)
# ==========================================================
@aul_bp.route("/userWise", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, ATTENDANCE)
def view_user_wise():
    page, limit, skip = get_pagination_args(request.args, default_limit=10)

    base_pipeline = [
        {"$lookup": {"from": "amavasyas", "localField": "amavasyaId", "foreignField": "_id", "as": "amavasya"}},
        {"$unwind": "$amavasya"},
        {"$lookup": {"from": "users", "localField": "userId", "foreignField": "_id", "as": "user"}},
        {"$unwind": "$user"},
        {"$lookup": {"from": "locations", "localField": "locationId", "foreignField": "_id", "as": "location"}},
        {"$unwind": "$location"},
        {"$sort": {"amavasya.startDate": -1}},
        {"$group": {
            "_id": "$user._id",
            "user": {"$first": "$user"},
            "latestAmavasya": {"$first": "$amavasya"},
            "latestLocation": {"$first": "$location"},
            "assignments": {"$push": {
                "_id": "$_id",
                "amavasya": "$amavasya",
                "location": "$location",
                "note": "$note",
                "isActive": "$isActive",
                "createdAt": "$createdAt",
            }},
        }},
        {"$sort": {"latestAmavasya.startDate": -1}},
        {"$project": {"user.password": 0, "user.refreshToken": 0}},
    ]

    collection = AmavasyaUserLocation.collection()
    items = list(collection.aggregate(base_pipeline + [{"$skip": skip}, {"$limit": limit}]))
    total_result = list(collection.aggregate(base_pipeline + [{"$count": "count"}]))
    total = total_result[0]["count"] if total_result else 0

    payload = make_pagination(items, total=total, page=page, limit=limit)
    return send_success("User wise amavasya list fetched", 200, payload)


# ==========================================================
# USER ATTENDANCE (Present / Absent + continuous streak)
# ==========================================================
@aul_bp.route("/userAttendance/<user_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, ATTENDANCE)
def user_attendance(user_id):
    year = request.args.get("year")
    if year and not year.isdigit():
        raise ApiError(400, "year must be a number")

    result = build_user_attendance(user_id, year)

    # filters narrow the listing only; totals and streak stay as computed
    status = request.args.get("status")
    if status:
        result["items"] = [i for i in result["items"] if i["status"] == status]

    search = (request.args.get("search") or "").strip().lower()
    if search:
        result["items"] = [i for i in result["items"] if search in (i.get("month") or "").lower()]

    message = "User amavasya attendance fetched" if result["totalAmavasya"] else "No amavasya attendance found"
    return send_success(message, 200, result)


# ==========================================================
# ROLE PERMISSIONS (same view as /activityPermission/permission)
# ==========================================================
@aul_bp.route("/permission/<role_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, USERS)
def role_permissions(role_id):
    items = resolve_role_permissions(mongo.db, to_object_id(role_id, "roleId"))
    return send_success("Role permissions fetched", 200, single_page(items))


# ==========================================================
# GET / UPDATE / DELETE BY ID
# ==========================================================
@aul_bp.route("/<record_id>", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_DETAILS, ATTENDANCE)
def get_assignment(record_id):
    record = AmavasyaUserLocation.collection().find_one({"_id": to_object_id(record_id)})
    if not record:
        raise ApiError(404, response_message.not_found("Record"))

    _populate([record])
    return send_success(response_message.fetched("Record"), 200, record)


@aul_bp.route("/<record_id>", methods=["PUT"])
@authenticate_user
@authorize_user(EDIT, ATTENDANCE)
@validate_schema(AULUpdateSchema, partial=True)
def edit_assignment(record_id):
    oid = to_object_id(record_id)
    current = AmavasyaUserLocation.collection().find_one({"_id": oid})
    if not current:
        raise ApiError(404, response_message.not_found("Record"))

    update_data = dict(g.body)
    for field in ("amavasyaId", "userId", "locationId"):
        if update_data.get(field):
            update_data[field] = ObjectId(update_data[field])
        else:
            update_data.pop(field, None)

    _check_references(update_data.get("amavasyaId"), update_data.get("userId"), update_data.get("locationId"))

    amavasya_id = update_data.get("amavasyaId", current["amavasyaId"])
    user_id = update_data.get("userId", current["userId"])
    clash = AmavasyaUserLocation.collection().find_one(
        {"amavasyaId": amavasya_id, "userId": user_id, "_id": {"$ne": oid}}, {"_id": 1}
    )
    if clash:
        raise ApiError(400, ALREADY_ASSIGNED)

    update_data["updatedBy"] = current_user_id()
    update_data["updatedAt"] = datetime.utcnow()
    try:
        record = AmavasyaUserLocation.collection().find_one_and_update(
            {"_id": oid}, {"$set": update_data}, return_document=ReturnDocument.AFTER
        )
    except DuplicateKeyError:
        raise ApiError(400, ALREADY_ASSIGNED)
    return send_success(response_message.updated("Record"), 200, record)


@aul_bp.route("/<record_id>", methods=["DELETE"])
@authenticate_user
@authorize_user(DELETE, ATTENDANCE)
def delete_assignment(record_id):
    result = AmavasyaUserLocation.collection().delete_one({"_id": to_object_id(record_id)})
    if result.deleted_count == 0:
        raise ApiError(404, response_message.not_found("Record"))
    return send_success(response_message.deleted("Record"), 200, None)
