from utils.db import mongo
from datetime import datetime

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class Amavasya:

    @staticmethod
    def collection():
        return mongo.db.amavasyas

    def __init__(self, month, year, startDate, endDate=None, startTime=None, endTime=None,
                 isActive=True, createdBy=None, created_at=None):
        self.month = month
        self.year = year
        self.startDate = startDate
        self.endDate = endDate
        self.startTime = startTime  # "HH:MM"
        self.endTime = endTime
        self.isActive = isActive
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "month": self.month,
            "year": self.year,
            "startDate": self.startDate,
            "endDate": self.endDate,
            "startTime": self.startTime,
            "endTime": self.endTime,
            "isActive": self.isActive,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.createdAt,
        }
