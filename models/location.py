from utils.db import mongo
from datetime import datetime


class Location:

    @staticmethod
    def collection():
        return mongo.db.locations

    def __init__(self, name, description=None, isActive=True, createdBy=None, created_at=None):
        self.name = name  # "Mandir", "Dharamshala", "Bhojnalaya", ...
        self.description = description
        self.isActive = isActive
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "name": self.name,
            "description": self.description,
            "isActive": self.isActive,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.createdAt,
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())
