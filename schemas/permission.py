from typing import ClassVar, FrozenSet, Literal, Optional

from pydantic import Field

from .common import RequestSchema, UpdateSchema


class PermissionCreateSchema(RequestSchema):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    status: Literal["Active", "Inactive"] = "Active"


class PermissionUpdateSchema(UpdateSchema):
    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"description"})

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[Literal["Active", "Inactive"]] = None
