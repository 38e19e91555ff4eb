"""
Pydantic schemas for booking writes.
"""

from typing import Any, Optional, Union

from bson import ObjectId
from pydantic import EmailStr, Field, field_validator

from devevent.schemas.base import InputSchema, TrimmedStr

EventRef = Union[ObjectId, TrimmedStr]


def _clean_email(value: Any) -> Any:
    # Stored addresses are lowercase; EmailStr only lowercases the domain
    return value.strip().lower() if isinstance(value, str) else value


class BookingCreate(InputSchema):
    event_id: EventRef = Field(alias="eventId")
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v: Any) -> Any:
        return _clean_email(v)


class BookingUpdate(InputSchema):
    event_id: Optional[EventRef] = Field(default=None, alias="eventId")
    email: Optional[EmailStr] = None

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v: Any) -> Any:
        return _clean_email(v)
