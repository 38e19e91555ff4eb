"""
Pytest fixtures for the in-memory database and sample records.

Tests run against mongomock-motor, an in-memory MongoDB emulation, with
the real index set created by ensure_indexes so unique constraints behave
as they do on a server.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient

from devevent.db.indexes import ensure_indexes
from devevent.models.event import Event
from devevent.services.event_service import create_event


@pytest_asyncio.fixture(scope="function")
async def db() -> AsyncGenerator:
    """Fresh database with all indexes for each test."""
    client = AsyncMongoMockClient()
    database = client["devevent_test"]
    await ensure_indexes(database)
    yield database


@pytest.fixture
def event_payload() -> dict:
    return {
        "title": "  PyCon Local Meetup  ",
        "description": "Monthly gathering of Python developers",
        "overview": "Talks, lightning talks and networking",
        "image": "/images/pycon.png",
        "venue": "Innovation Hub",
        "location": "Berlin, Germany",
        "date": "March 5, 2025",
        "time": "6:30 PM",
        "mode": "offline",
        "audience": "Developers",
        "agenda": ["Welcome", "Keynote", "Lightning talks"],
        "organizer": "Python Berlin",
        "tags": ["python", "meetup"],
    }


@pytest_asyncio.fixture
async def test_event(db, event_payload) -> Event:
    """A stored event."""
    return await create_event(db, event_payload)
