from functools import wraps

from flask import g, request
from pydantic import ValidationError

from utils.helpers import trim_request_body
from utils.responses import ApiError


def _first_error(exc):
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error.get("loc", ()))
    message = error.get("msg", "Invalid request")
    return f"{field}: {message}" if field else message


def validate_schema(schema, partial=False):
    """
    Validate the JSON body against a pydantic schema.
    The cleaned body is exposed as g.body; with partial=True only the
    fields the client actually sent are kept (for updates).
    """
    def decorator(view_function):
        @wraps(view_function)
        def decorated_function(*args, **kwargs):
            body = request.get_json(silent=True)
            if not isinstance(body, dict):
                raise ApiError(400, "Request body must be a JSON object")
            try:
                parsed = schema.model_validate(trim_request_body(body))
            except ValidationError as exc:
                raise ApiError(400, _first_error(exc))
            g.body = parsed.model_dump(exclude_unset=partial)
            return view_function(*args, **kwargs)
        return decorated_function
    return decorator
