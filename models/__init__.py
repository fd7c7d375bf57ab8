# models/__init__.py

from .roles import Role
from .users import User
from .permission import Permission
from .activity import Activity
from .activity_permission import ActivityPermission
from .location import Location
from .amavasya import Amavasya
from .amavasya_user_location import AmavasyaUserLocation

__all__ = [
    "Role",
    "User",
    "Permission",
    "Activity",
    "ActivityPermission",
    "Location",
    "Amavasya",
    "AmavasyaUserLocation",
]
