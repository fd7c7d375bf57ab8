from utils.db import mongo
from datetime import datetime

ADMIN_ROLE = "Admin"
SEVAK_ROLE = "Sevak"


class Role:

    @staticmethod
    def collection():
        return mongo.db.roles

    def __init__(self, name, description=None, status="Active", isSystemLogin=False,
                 createdBy=None, created_at=None):
        self.name = name
        self.description = description
        self.status = status
        self.isActive = status == "Active"
        self.isSystemLogin = isSystemLogin
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "name": self.name,
            "description": self.description,
            "status": self.status,
            "isActive": self.isActive,
            "isSystemLogin": self.isSystemLogin,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.createdAt,
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())
