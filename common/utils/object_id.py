"""
ObjectId parsing and JSON-safe serialization.
"""

from datetime import datetime
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId

from common.utils.exceptions import BadRequestException


def to_object_id(value: Any, label: str = "ID") -> ObjectId:
    """
    Parse a client-supplied identifier.

    Args:
        value: String (or ObjectId) from the request
        label: Name used in the error message, e.g. "course ID"

    Raises:
        BadRequestException: If the value is not a valid ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise BadRequestException(
            message=f"Invalid {label}",
            code="INVALID_ID",
        )


def serialize(value: Any) -> Any:
    """
    Convert a Mongo document into JSON-safe data.

    `_id` keys become `id`, ObjectIds become strings and datetimes are
    rendered in ISO-8601.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {
            ("id" if key == "_id" else key): serialize(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    return value
