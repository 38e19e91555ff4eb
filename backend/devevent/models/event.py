"""
Event document stored in the `events` collection.

Key design decisions:
- `slug` is derived from the title at write time and kept unique by index
- `date` is stored as YYYY-MM-DD and `time` as 24-hour HH:MM, both
  normalized before every write (see services.normalization)
"""

from pymongo import ASCENDING

from devevent.db.base import Document

COLLECTION = "events"

INDEXES = [
    ([("slug", ASCENDING)], {"unique": True, "name": "uniq_slug"}),
]


class Event(Document):
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    agenda: list[str]
    organizer: str
    tags: list[str]

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, slug={self.slug}, date={self.date} {self.time})>"
