"""
Booking document stored in the `bookings` collection.

Key design decisions:
- `eventId` is a non-owning reference; existence is checked at write time,
  deleting the event does not cascade
- Unique index on (eventId, email) allows one booking per attendee per event
- (eventId, createdAt desc) serves the "latest bookings for an event" listing
"""

from bson import ObjectId
from pydantic import Field
from pymongo import ASCENDING, DESCENDING

from devevent.db.base import Document

COLLECTION = "bookings"

INDEXES = [
    ([("eventId", ASCENDING)], {"name": "eventId_1"}),
    ([("eventId", ASCENDING), ("createdAt", DESCENDING)], {"name": "eventId_1_createdAt_-1"}),
    ([("email", ASCENDING)], {"name": "email_1"}),
    ([("eventId", ASCENDING), ("email", ASCENDING)], {"unique": True, "name": "uniq_event_email"}),
]


class Booking(Document):
    event_id: ObjectId = Field(alias="eventId")
    email: str

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, email={self.email})>"
