from utils.db import mongo
from datetime import datetime
from bson import ObjectId


class ActivityPermission:
    """
    One row per (role, activity) holding the granted permission ids.
    Rows written before the array migration hold "id1,id2" strings;
    readers go through utils.abac.normalize_permission_ids.
    """

    @staticmethod
    def collection():
        return mongo.db.activity_permissions

    def __init__(self, roleId, activityId, permissionIds=None, createdBy=None, created_at=None):
        self.roleId = ObjectId(roleId)
        self.activityId = ObjectId(activityId)
        self.permissionIds = [ObjectId(pid) for pid in (permissionIds or [])]
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "roleId": self.roleId,
            "activityId": self.activityId,
            "permissionIds": self.permissionIds,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.createdAt,
        }
