import re
from datetime import date, datetime
from bson import ObjectId
from bson.errors import InvalidId
from flask.json.provider import DefaultJSONProvider

from utils.responses import ApiError


def to_object_id(value, field="id"):
    """Parse a path/body id, raising a 400 ApiError when it is malformed."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise ApiError(400, f"Invalid {field}")


UNTRIMMED_FIELDS = {"password", "confirmPassword"}


def trim_request_body(obj):
    """Strip strings and collapse inner whitespace, recursively. Passwords are left alone."""
    if isinstance(obj, dict):
        return {
            key: value if key in UNTRIMMED_FIELDS else trim_request_body(value)
            for key, value in obj.items()
        }
    if isinstance(obj, list):
        return [trim_request_body(value) for value in obj]
    if isinstance(obj, str):
        return re.sub(r"\s+", " ", obj.strip())
    return obj


class MongoJSONProvider(DefaultJSONProvider):
    """Render ObjectId as str and datetimes as ISO-8601."""

    @staticmethod
    def default(o):
        if isinstance(o, ObjectId):
            return str(o)
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        return DefaultJSONProvider.default(o)
