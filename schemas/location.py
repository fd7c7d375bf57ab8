from typing import ClassVar, FrozenSet, Optional

from pydantic import Field

from .common import RequestSchema, UpdateSchema


class LocationCreateSchema(RequestSchema):
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    isActive: bool = True


class LocationUpdateSchema(UpdateSchema):
    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"description"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    isActive: Optional[bool] = None
