"""Helper utilities for the reconciliation job."""

from typing import Any
from bson import ObjectId


def coerce_object_id(value: Any) -> ObjectId | None:
    """Convert a stored reference to an ObjectId.

    Accepts ObjectId instances and 24-character hex strings. Anything else
    (None, garbage strings, numbers) yields None so it never compares equal
    to a known identifier.
    """
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def room_number_text(value: Any) -> Any:
    """Room numbers entered as bare integers are stored as their text."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def display_value(value: Any) -> str:
    """Render a possibly-missing field for log output."""
    if value is None or value == "":
        return "null"
    return str(value)
