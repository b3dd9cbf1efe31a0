from datetime import datetime, timezone
from typing import Optional
from bson import ObjectId
from bson.errors import InvalidId


def object_id_to_str(obj_id) -> str:
    """Convert ObjectId to string."""
    if isinstance(obj_id, ObjectId):
        return str(obj_id)
    return obj_id


def parse_object_id(value) -> Optional[ObjectId]:
    """Parse a client-supplied identifier, returning None when it is malformed."""
    if isinstance(value, ObjectId):
        return value
    if value is None:
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def format_document(document: dict) -> dict:
    """Return a copy of a MongoDB document with ObjectIds rendered as strings."""
    formatted = {}
    for key, value in document.items():
        if isinstance(value, list):
            formatted[key] = [
                format_document(v) if isinstance(v, dict) else object_id_to_str(v)
                for v in value
            ]
        elif isinstance(value, dict):
            formatted[key] = format_document(value)
        else:
            formatted[key] = object_id_to_str(value)
    return formatted


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)
