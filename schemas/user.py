from typing import Optional

from pydantic import Field

from .auth import EMAIL_PATTERN
from .common import ObjectIdStr, RequestSchema, UpdateSchema

MOBILE_PATTERN = r"^[0-9]{10}$"


class UserCreateSchema(RequestSchema):
    userName: str = Field(min_length=3, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN)
    mobileNumber: str = Field(pattern=MOBILE_PATTERN)
    password: str = Field(min_length=6)
    roleId: ObjectIdStr


class UserUpdateSchema(UpdateSchema):
    userName: Optional[str] = Field(default=None, min_length=3, max_length=50)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    mobileNumber: Optional[str] = Field(default=None, pattern=MOBILE_PATTERN)
    password: Optional[str] = Field(default=None, min_length=6)
    roleId: Optional[ObjectIdStr] = None
    isActive: Optional[bool] = None
