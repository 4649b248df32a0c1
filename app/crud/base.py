import uuid
from typing import Any, Optional


def parse_uuid(value: Any) -> Optional[uuid.UUID]:
    """Return a UUID for `value`, or None when it is not a well-formed id."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None
