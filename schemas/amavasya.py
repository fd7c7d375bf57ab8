from typing import ClassVar, FrozenSet, Literal, Optional

from pydantic import Field

from .common import NaiveDatetime, RequestSchema, UpdateSchema

Month = Literal[
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class AmavasyaCreateSchema(RequestSchema):
    month: Month
    year: int = Field(ge=1900, le=3000)
    startDate: NaiveDatetime
    endDate: Optional[NaiveDatetime] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    isActive: bool = True


class AmavasyaUpdateSchema(UpdateSchema):
    NULLABLE: ClassVar[FrozenSet[str]] = frozenset({"endDate", "startTime", "endTime"})

    month: Optional[Month] = None
    year: Optional[int] = Field(default=None, ge=1900, le=3000)
    startDate: Optional[NaiveDatetime] = None
    endDate: Optional[NaiveDatetime] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    isActive: Optional[bool] = None
