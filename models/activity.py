from utils.db import mongo
from datetime import datetime

# Application areas permissions are scoped to
DASHBOARD = "DASHBOARD"
TASKS = "TASKS"
USERS = "USERS"
REPORTS = "REPORTS"
ATTENDANCE = "ATTENDANCE"
LOCATIONS = "LOCATIONS"

ALL_ACTIVITIES = [DASHBOARD, TASKS, USERS, REPORTS, ATTENDANCE, LOCATIONS]


class Activity:

    @staticmethod
    def collection():
        return mongo.db.activities

    def __init__(self, name, status="ACTIVE", createdBy=None, created_at=None):
        self.name = name
        self.status = status  # "ACTIVE" | "INACTIVE"
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "name": self.name,
            "status": self.status,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.createdAt,
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())
