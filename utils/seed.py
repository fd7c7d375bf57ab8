"""
utils/seed.py
-----------------
Initial data for a fresh database: locations, roles, permissions,
activities, role mappings and the first admin user.
Every step is idempotent; running it twice changes nothing.
"""

import logging
from datetime import datetime

from models.activity import Activity, ALL_ACTIVITIES, DASHBOARD, ATTENDANCE
from models.activity_permission import ActivityPermission
from models.location import Location
from models.permission import Permission, ALL_PERMISSIONS, VIEW_LIST, VIEW_DETAILS
from models.roles import Role, ADMIN_ROLE, SEVAK_ROLE
from models.users import User

logger = logging.getLogger("sevak.seed")

DEFAULT_LOCATIONS = ["Mandir", "Dharamshala", "Bhojnalaya"]

# Sevak sees the dashboard and their attendance, nothing else
SEVAK_GRANTS = {
    DASHBOARD: [VIEW_LIST, VIEW_DETAILS],
    ATTENDANCE: [VIEW_LIST, VIEW_DETAILS],
}


def _get_or_create(model, query):
    existing = model.collection().find_one(query)
    if existing:
        return existing["_id"], False
    return model.save().inserted_id, True


def seed_locations():
    created = 0
    for name in DEFAULT_LOCATIONS:
        _, new = _get_or_create(Location(name), {"name": name})
        created += new
    return created


def seed_roles():
    admin_id, _ = _get_or_create(Role(ADMIN_ROLE, description="Full access", isSystemLogin=True), {"name": ADMIN_ROLE})
    sevak_id, _ = _get_or_create(Role(SEVAK_ROLE, description="Volunteer"), {"name": SEVAK_ROLE})
    return {ADMIN_ROLE: admin_id, SEVAK_ROLE: sevak_id}


def seed_permissions():
    return {
        name: _get_or_create(Permission(name), {"name": name})[0]
        for name in ALL_PERMISSIONS
    }


def seed_activities():
    return {
        name: _get_or_create(Activity(name), {"name": name})[0]
        for name in ALL_ACTIVITIES
    }


def _grant(role_id, activity_id, permission_ids):
    """Create the (role, activity) row or add missing permission ids to it."""
    row = ActivityPermission.collection().find_one({"roleId": role_id, "activityId": activity_id})
    if row is None:
        ActivityPermission.collection().insert_one(ActivityPermission(role_id, activity_id, permission_ids).to_dict())
        return

    ActivityPermission.collection().update_one(
        {"_id": row["_id"]},
        {"$addToSet": {"permissionIds": {"$each": permission_ids}}, "$set": {"updatedAt": datetime.utcnow()}},
    )


def seed_role_permissions(roles, permissions, activities):
    for activity_id in activities.values():
        _grant(roles[ADMIN_ROLE], activity_id, list(permissions.values()))

    for activity_name, names in SEVAK_GRANTS.items():
        _grant(roles[SEVAK_ROLE], activities[activity_name], [permissions[n] for n in names])


def seed_admin_user(email, password, role_id):
    if User.find_by_email(email):
        return None
    user = User("Admin", email, password, role_id, isVerified=True)
    return user.save().inserted_id


def run_seed(config):
    locations = seed_locations()
    roles = seed_roles()
    permissions = seed_permissions()
    activities = seed_activities()
    seed_role_permissions(roles, permissions, activities)
    admin_id = seed_admin_user(config["ADMIN_EMAIL"], config["ADMIN_PASSWORD"], roles[ADMIN_ROLE])

    logger.info("Seed complete: %d new locations, admin %s", locations, "created" if admin_id else "kept")
    return {"roles": roles, "permissions": permissions, "activities": activities, "adminId": admin_id}
