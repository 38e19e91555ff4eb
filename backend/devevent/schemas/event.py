"""
Pydantic schemas for event writes.

`date` and `time` are accepted as free-form text here; they are
normalized (and rejected if unparseable) by the event pipeline.
"""

from typing import Annotated, Optional
from pydantic import Field

from devevent.schemas.base import InputSchema, TrimmedStr

StringList = Annotated[list[TrimmedStr], Field(min_length=1)]


class EventCreate(InputSchema):
    title: TrimmedStr
    description: TrimmedStr
    overview: TrimmedStr
    image: TrimmedStr
    venue: TrimmedStr
    location: TrimmedStr
    date: TrimmedStr
    time: TrimmedStr
    mode: TrimmedStr
    audience: TrimmedStr
    agenda: StringList
    organizer: TrimmedStr
    tags: StringList


class EventUpdate(InputSchema):
    title: Optional[TrimmedStr] = None
    description: Optional[TrimmedStr] = None
    overview: Optional[TrimmedStr] = None
    image: Optional[TrimmedStr] = None
    venue: Optional[TrimmedStr] = None
    location: Optional[TrimmedStr] = None
    date: Optional[TrimmedStr] = None
    time: Optional[TrimmedStr] = None
    mode: Optional[TrimmedStr] = None
    audience: Optional[TrimmedStr] = None
    agenda: Optional[StringList] = None
    organizer: Optional[TrimmedStr] = None
    tags: Optional[StringList] = None
