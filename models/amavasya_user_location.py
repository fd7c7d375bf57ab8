from utils.db import mongo
from datetime import datetime
from bson import ObjectId


class AmavasyaUserLocation:
    """
    A Sevak assigned to a location for one Amavasya.
    The record existing at all is what marks the Sevak present.
    """

    @staticmethod
    def collection():
        return mongo.db.amavasya_user_locations

    def __init__(self, amavasyaId, userId, locationId, note=None, isActive=True,
                 createdBy=None, created_at=None):
        self.amavasyaId = ObjectId(amavasyaId)
        self.userId = ObjectId(userId)
        self.locationId = ObjectId(locationId)
        self.note = note
        self.isActive = isActive
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "amavasyaId": self.amavasyaId,
            "userId": self.userId,
            "locationId": self.locationId,
            "note": self.note,
            "isActive": self.isActive,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.createdAt,
        }

    @staticmethod
    def exists(amavasya_id, user_id):
        return AmavasyaUserLocation.collection().count_documents(
            {"amavasyaId": ObjectId(amavasya_id), "userId": ObjectId(user_id)}, limit=1
        ) > 0
