"""
utils/pagination.py
-----------------
Shared page / limit / sort / search handling for every list endpoint.
"""

import math
import re
from flask import current_app
from pymongo import ASCENDING, DESCENDING


def make_pagination(items, total=0, page=1, limit=20):
    page = int(page or 1)
    limit = int(limit or 0)
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
        "currentPageItems": len(items),
        "previousPage": page > 1,
        "nextPage": page * limit < total,
    }


def single_page(items):
    """Pagination payload for endpoints that return everything at once."""
    return make_pagination(items, total=len(items), page=1, limit=len(items)) | {"totalPages": 1}


def _to_int(value, default):
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def get_pagination_args(args, default_limit=None):
    """Read ?page=&limit= with a floor of 1 and the configured ceiling."""
    if default_limit is None:
        default_limit = current_app.config.get("DEFAULT_PAGE_LIMIT", 20)
    max_limit = current_app.config.get("MAX_PAGE_LIMIT", 100)

    page = max(_to_int(args.get("page"), 1), 1)
    limit = _to_int(args.get("limit"), default_limit)
    limit = min(max(limit, 1), max_limit)
    return page, limit, (page - 1) * limit


def get_sort_args(args, allowed, default="createdAt"):
    sort_by = args.get("sortBy") or default
    if sort_by not in allowed:
        sort_by = default
    direction = ASCENDING if (args.get("sortOrder") or "desc").lower() == "asc" else DESCENDING
    return [(sort_by, direction)]


def regex(value):
    """Case-insensitive contains match; user input is escaped."""
    return {"$regex": re.escape(value.strip()), "$options": "i"}


def parse_bool(value):
    if value is None:
        return None
    return str(value).strip().lower() in {"true", "1", "yes"}


def paginate(collection, query, args, sort=None, projection=None, default_limit=None):
    page, limit, skip = get_pagination_args(args, default_limit)

    cursor = collection.find(query, projection)
    if sort:
        cursor = cursor.sort(sort)
    items = list(cursor.skip(skip).limit(limit))
    total = collection.count_documents(query)

    return make_pagination(items, total=total, page=page, limit=limit)
