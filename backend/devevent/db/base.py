"""
Base document model and shared helpers for stored records.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    # MongoDB stores milliseconds; trim so in-memory values match what is read back
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return value as an ObjectId, or None when it cannot be one."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except InvalidId:
        return None


class Document(BaseModel):
    """Fields every stored record carries: identity and timestamps."""

    id: Optional[ObjectId] = Field(default=None, alias="_id")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    def to_document(self) -> dict[str, Any]:
        """Serialize with stored field names, leaving out an unassigned _id."""
        return self.model_dump(by_alias=True, exclude_none=True)
