from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer


def to_utc_iso(dt: Optional[datetime]) -> Optional[str]:
    """Format as ISO 8601 in UTC with an explicit 'Z' suffix."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


UTCDateTime = Annotated[datetime, PlainSerializer(to_utc_iso, return_type=Optional[str])]


class BaseConfig(BaseModel):
    """Response models read from ORM rows and emit camelCase field names."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
