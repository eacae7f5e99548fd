from .helpers import (
    serialize_mongo_doc,
    success_response,
    error_response,
    parse_object_id,
    paginate,
    pagination_meta,
    active_window_filter,
    slugify,
)
from .logger import Logger, set_log_level

__all__ = [
    "serialize_mongo_doc",
    "success_response",
    "error_response",
    "parse_object_id",
    "paginate",
    "pagination_meta",
    "active_window_filter",
    "slugify",
    "Logger",
    "set_log_level",
]
