"""Utilities for roomsync."""

from roomsync.utils.helpers import coerce_object_id, display_value, room_number_text

__all__ = [
    "coerce_object_id",
    "display_value",
    "room_number_text",
]
