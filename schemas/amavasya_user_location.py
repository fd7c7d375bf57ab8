from typing import ClassVar, FrozenSet, List, Optional

from pydantic import Field

from .common import ObjectIdStr, RequestSchema, UpdateSchema


class AULCreateSchema(RequestSchema):
    amavasyaId: ObjectIdStr
    userId: ObjectIdStr
    locationId: ObjectIdStr
    note: Optional[str] = None


class AULUpdateSchema(UpdateSchema):
    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"note"})

    amavasyaId: Optional[ObjectIdStr] = None
    userId: Optional[ObjectIdStr] = None
    locationId: Optional[ObjectIdStr] = None
    note: Optional[str] = None
    isActive: Optional[bool] = None


class AULBulkCreateSchema(RequestSchema):
    amavasyaId: ObjectIdStr
    userIds: List[ObjectIdStr] = Field(min_length=1)
    locationId: ObjectIdStr
    note: Optional[str] = None
