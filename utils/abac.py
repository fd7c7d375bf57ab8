"""
utils/abac.py
-----------------
Role -> activity -> permission resolution.

activity_permissions rows look like
    {"roleId": ObjectId, "activityId": ObjectId, "permissionIds": [ObjectId, ...]}
Older rows may store permissionIds as a comma-joined string; both shapes are
normalized before any comparison.
"""

import logging
from bson import ObjectId

logger = logging.getLogger("sevak.abac")


def normalize_permission_ids(value):
    """Return permission ids as an ordered list of strings."""
    if isinstance(value, str):
        return [pid.strip() for pid in value.split(",") if pid.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(pid) for pid in value if pid is not None]
    return []


def _as_object_ids(ids):
    return [ObjectId(pid) for pid in ids if ObjectId.is_valid(pid)]


def resolve_role_permissions(db, role_id):
    """
    All activity mappings of a role with permission ids swapped for names.

    Permission names are looked up once for the union of ids referenced by
    any row; ids without a permission document are dropped.
    """
    rows = list(db.activity_permissions.find({"roleId": role_id}).sort("createdAt", 1))

    row_ids = [normalize_permission_ids(row.get("permissionIds")) for row in rows]
    unique_ids = {pid for ids in row_ids for pid in ids}

    id_to_name = {}
    if unique_ids:
        for permission in db.permissions.find({"_id": {"$in": _as_object_ids(unique_ids)}}, {"name": 1}):
            id_to_name[str(permission["_id"])] = permission["name"]

    activity_ids = list({row.get("activityId") for row in rows if row.get("activityId")})
    activities = {
        activity["_id"]: activity
        for activity in db.activities.find({"_id": {"$in": activity_ids}}, {"name": 1, "status": 1})
    } if activity_ids else {}

    result = []
    for row, ids in zip(rows, row_ids):
        activity = activities.get(row.get("activityId"))
        result.append({
            "id": row["_id"],
            "activityId": row.get("activityId"),
            "activityName": activity.get("name") if activity else None,
            "permissionNames": [id_to_name[pid] for pid in ids if pid in id_to_name],
        })
    return result


def has_permission(db, user, action, activity_name):
    """
    True only if the user's role grants `action` on `activity_name`.
    Every missing link, and any error on the way, denies.
    """
    try:
        if not user or not user.get("id"):
            return False

        user_doc = db.users.find_one({"_id": ObjectId(user["id"])}, {"roleId": 1})
        if not user_doc or not user_doc.get("roleId"):
            return False
        role_id = user_doc["roleId"]

        activity = db.activities.find_one({"name": activity_name}, {"_id": 1})
        if not activity:
            return False

        permission = db.permissions.find_one({"name": action}, {"_id": 1})
        if not permission:
            return False
        permission_id = str(permission["_id"])

        rows = list(db.activity_permissions.find({"roleId": role_id, "activityId": activity["_id"]}))
        if not rows:
            return False

        for row in rows:
            if permission_id in set(normalize_permission_ids(row.get("permissionIds"))):
                return True

        return False
    except Exception as e:
        logger.error("Error in evaluating permission %s on %s: %s", action, activity_name, e)
        return False
