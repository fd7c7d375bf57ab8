from utils.db import mongo
from datetime import datetime

# Names seeded at install time and used by the route guards
VIEW_LIST = "VIEW LIST"
VIEW_DETAILS = "VIEW DETAILS"
CREATE = "CREATE"
EDIT = "EDIT"
DELETE = "DELETE"
PRINT = "PRINT"
DOWNLOAD = "DOWNLOAD"

ALL_PERMISSIONS = [VIEW_LIST, VIEW_DETAILS, CREATE, EDIT, DELETE, PRINT, DOWNLOAD]


class Permission:

    @staticmethod
    def collection():
        return mongo.db.permissions

    def __init__(self, name, description=None, status="Active", createdBy=None, created_at=None):
        self.name = name
        self.description = description
        self.status = status  # "Active" | "Inactive"
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.createdAt,
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())
