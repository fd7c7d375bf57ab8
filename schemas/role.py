from typing import ClassVar, FrozenSet, Literal, Optional

from pydantic import Field

from .common import RequestSchema, UpdateSchema


class RoleCreateSchema(RequestSchema):
    name: str = Field(min_length=3, max_length=50)
    description: Optional[str] = None
    status: Literal["Active", "Inactive"] = "Active"
    isSystemLogin: bool = False


class RoleUpdateSchema(UpdateSchema):
    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"description"})

    name: Optional[str] = Field(default=None, min_length=3, max_length=50)
    description: Optional[str] = None
    status: Optional[Literal["Active", "Inactive"]] = None
    isSystemLogin: Optional[bool] = None
