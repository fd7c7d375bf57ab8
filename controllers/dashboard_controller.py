from flask import Blueprint, request
from datetime import datetime

from models.activity import DASHBOARD
from models.permission import VIEW_LIST
from utils.auth import authenticate_user, authorize_user
from utils.dashboard import bucket_amavasya_timeline, timeline_window
from utils.db import mongo
from utils.pagination import regex, single_page
from utils.responses import send_success

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1/dashboard")


# ---------------- Totals ----------------
@dashboard_bp.route("/counts", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, DASHBOARD)
def dashboard_counts():
    db = mongo.db
    payload = {
        "users": db.users.count_documents({}),
        "roles": db.roles.count_documents({}),
        "locations": db.locations.count_documents({}),
        "permissions": db.permissions.count_documents({}),
        "amavasya": db.amavasyas.count_documents({}),
        "amavasyaUserLocations": db.amavasya_user_locations.count_documents({}),
    }
    return send_success("Dashboard counts fetched successfully", 200, payload)


# ---------------- Attendance per Sevak (highest first) ----------------
@dashboard_bp.route("/userAttendanceCount", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, DASHBOARD)
def user_attendance_count():
    search = (request.args.get("search") or "").strip()

    pipeline = [
        {"$match": {"isActive": True}},
        {"$group": {"_id": "$userId", "totalAttendance": {"$sum": 1}}},
        {"$lookup": {"from": "users", "localField": "_id", "foreignField": "_id", "as": "user"}},
        {"$unwind": "$user"},
    ]
    if search:
        pipeline.append({"$match": {"$or": [
            {"user.userName": regex(search)},
            {"user.email": regex(search)},
        ]}})
    pipeline += [
        {"$project": {
            "_id": 0,
            "userId": "$user._id",
            "userName": "$user.userName",
            "email": "$user.email",
            "totalAttendance": 1,
        }},
        {"$sort": {"totalAttendance": -1, "userName": 1}},
    ]

    items = list(mongo.db.amavasya_user_locations.aggregate(pipeline))
    return send_success("User attendance count fetched", 200, {"items": items, "totalUsers": len(items)})


# ---------------- Last / current / next month ----------------
@dashboard_bp.route("/amavasya", methods=["GET"])
@authenticate_user
@authorize_user(VIEW_LIST, DASHBOARD)
def amavasya_timeline():
    now = datetime.utcnow()
    start, end = timeline_window(now)

    events = list(mongo.db.amavasyas.find({"startDate": {"$gte": start, "$lte": end}}))
    items = bucket_amavasya_timeline(events, now)
    return send_success("Amavasya list fetched (future, current, past)", 200, single_page(items))
