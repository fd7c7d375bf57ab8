"""
utils/db.py
-----------------
This module initializes and manages the MongoDB connection
for the entire Flask application.
"""

import logging
from flask_pymongo import PyMongo
from pymongo import ASCENDING

# Create a global MongoDB instance
mongo = PyMongo()

logger = logging.getLogger("sevak.db")


def init_db_connection(app):
    """
    Initialize MongoDB connection with Flask app.
    Reads MONGO_URI from the app config loaded in create_app().
    """
    mongo.init_app(app)
    logger.info("MongoDB connection initialized for %s", app.config.get("MONGO_URI"))
    return mongo


def ensure_indexes(db):
    db.users.create_index([("email", ASCENDING)], unique=True)
    db.roles.create_index([("name", ASCENDING)], unique=True)
    db.permissions.create_index([("name", ASCENDING)], unique=True)
    db.activities.create_index([("name", ASCENDING)], unique=True)
    db.activity_permissions.create_index([("roleId", ASCENDING), ("activityId", ASCENDING)])
    db.amavasyas.create_index([("startDate", ASCENDING)])

    # one attendance record per (event, user)
    db.amavasya_user_locations.create_index(
        [("amavasyaId", ASCENDING), ("userId", ASCENDING)], unique=True
    )
    logger.info("MongoDB indexes ensured")
