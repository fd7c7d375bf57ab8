# schemas/__init__.py

from .common import ObjectIdStr, NaiveDatetime, StatusUpdateSchema
from .auth import LoginSchema, RefreshTokenSchema, ForgotPasswordSchema, ResetPasswordSchema, VerifyUserSchema
from .user import UserCreateSchema, UserUpdateSchema
from .role import RoleCreateSchema, RoleUpdateSchema
from .permission import PermissionCreateSchema, PermissionUpdateSchema
from .activity import ActivityCreateSchema, ActivityUpdateSchema, ActivityStatusSchema
from .activity_permission import ActivityPermissionAssignSchema
from .location import LocationCreateSchema, LocationUpdateSchema
from .amavasya import AmavasyaCreateSchema, AmavasyaUpdateSchema
from .amavasya_user_location import AULCreateSchema, AULUpdateSchema, AULBulkCreateSchema

__all__ = [
    "ObjectIdStr",
    "NaiveDatetime",
    "StatusUpdateSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "ForgotPasswordSchema",
    "ResetPasswordSchema",
    "VerifyUserSchema",
    "UserCreateSchema",
    "UserUpdateSchema",
    "RoleCreateSchema",
    "RoleUpdateSchema",
    "PermissionCreateSchema",
    "PermissionUpdateSchema",
    "ActivityCreateSchema",
    "ActivityUpdateSchema",
    "ActivityStatusSchema",
    "ActivityPermissionAssignSchema",
    "LocationCreateSchema",
    "LocationUpdateSchema",
    "AmavasyaCreateSchema",
    "AmavasyaUpdateSchema",
    "AULCreateSchema",
    "AULUpdateSchema",
    "AULBulkCreateSchema",
]
