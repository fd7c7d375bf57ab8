from typing import Literal, Optional

from pydantic import Field

from .common import RequestSchema, UpdateSchema


class ActivityCreateSchema(RequestSchema):
    name: str = Field(min_length=3, max_length=100)
    status: Literal["ACTIVE", "INACTIVE"] = "ACTIVE"


class ActivityUpdateSchema(UpdateSchema):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    status: Optional[Literal["ACTIVE", "INACTIVE"]] = None


class ActivityStatusSchema(RequestSchema):
    status: Literal["ACTIVE", "INACTIVE"]
