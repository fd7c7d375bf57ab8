from utils.db import mongo
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from bson import ObjectId

# password and refresh token never leave the API
PUBLIC_PROJECTION = {"password": 0, "refreshToken": 0}


class User:

    @staticmethod
    def collection():
        return mongo.db.users

    def __init__(self, userName, email, password, roleId, mobileNumber=None, isActive=True,
                 isVerified=False, createdBy=None, created_at=None):
        self.userName = userName
        self.email = email.strip().lower()
        self.password = generate_password_hash(password) if password else None
        self.roleId = ObjectId(roleId) if roleId else None
        self.mobileNumber = mobileNumber
        self.isActive = isActive
        self.isVerified = isVerified
        self.createdBy = createdBy
        self.createdAt = created_at or datetime.utcnow()
        self.updatedAt = self.createdAt

    # Convert to dictionary for MongoDB
    def to_dict(self):
        return {
            "userName": self.userName,
            "email": self.email,
            "password": self.password,
            "mobileNumber": self.mobileNumber,
            "roleId": self.roleId,
            "isActive": self.isActive,
            "isVerified": self.isVerified,
            "refreshToken": None,
            "createdBy": self.createdBy,
            "updatedBy": None,
            "createdAt": self.createdAt,
            "updatedAt": self.updatedAt,
        }

    # Save new user
    def save(self):
        return self.collection().insert_one(self.to_dict())

    # Find user by ID
    @staticmethod
    def find_by_id(user_id, projection=None):
        return User.collection().find_one({"_id": ObjectId(user_id)}, projection)

    # Find user by email
    @staticmethod
    def find_by_email(email):
        return User.collection().find_one({"email": (email or "").strip().lower()})

    # Verify password
    @staticmethod
    def verify_password(email, password):
        user = User.find_by_email(email)
        if user and user.get("password") and check_password_hash(user["password"], password):
            return user
        return None

    @staticmethod
    def hash_password(password):
        return generate_password_hash(password)

    @staticmethod
    def set_refresh_token(user_id, token):
        return User.collection().update_one(
            {"_id": ObjectId(user_id)},
            {"$set": {"refreshToken": token, "updatedAt": datetime.utcnow()}}
        )
