from datetime import datetime, timezone
from typing import Annotated, ClassVar, FrozenSet, Literal

from bson import ObjectId
from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator


def _check_object_id(value: str) -> str:
    if not ObjectId.is_valid(value):
        raise ValueError("must be a valid id")
    return value


def _to_naive_utc(value: datetime) -> datetime:
    # MongoDB hands back naive UTC datetimes; store them the same way
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


ObjectIdStr = Annotated[str, AfterValidator(_check_object_id)]
NaiveDatetime = Annotated[datetime, AfterValidator(_to_naive_utc)]


class RequestSchema(BaseModel):
    model_config = ConfigDict(extra="forbid")


class StatusUpdateSchema(RequestSchema):
    status: Literal["Active", "Inactive"]


class UpdateSchema(RequestSchema):
    """
    Partial update body. Omitted fields are left alone; an explicit null is
    only accepted for the fields listed in NULLABLE.
    """

    NULLABLE: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def reject_null_fields(cls, data):
        if isinstance(data, dict):
            for key, value in data.items():
                if value is None and key in cls.model_fields and key not in cls.NULLABLE:
                    raise ValueError(f"{key} cannot be null")
        return data
