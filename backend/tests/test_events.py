"""
Tests for event service operations.
"""

import pytest
from bson import ObjectId

from devevent.core.exceptions import ConstraintViolation, NotFoundError, ValidationError
from devevent.models.event import COLLECTION
from devevent.services.event_service import (
    create_event,
    delete_event,
    get_event,
    get_event_by_slug,
    list_events,
    update_event,
)


@pytest.mark.asyncio
async def test_create_event(db, event_payload):
    """Stored fields are trimmed and normalized."""
    event = await create_event(db, event_payload)

    assert event.id is not None
    assert event.title == "PyCon Local Meetup"
    assert event.slug == "pycon-local-meetup"
    assert event.date == "2025-03-05"
    assert event.time == "18:30"
    assert event.created_at is not None
    assert event.created_at == event.updated_at

    stored = await db[COLLECTION].find_one({"_id": event.id})
    assert stored["slug"] == "pycon-local-meetup"
    assert stored["date"] == "2025-03-05"
    assert stored["time"] == "18:30"
    assert "createdAt" in stored and "updatedAt" in stored


@pytest.mark.asyncio
async def test_create_event_invalid_date(db, event_payload):
    """Unparseable date is rejected and nothing is written."""
    event_payload["date"] = "not-a-date"
    with pytest.raises(ValidationError) as exc_info:
        await create_event(db, event_payload)

    assert exc_info.value.message == "Invalid date value"
    assert await db[COLLECTION].count_documents({}) == 0


@pytest.mark.asyncio
async def test_create_event_invalid_time(db, event_payload):
    event_payload["time"] = "14:65"
    with pytest.raises(ValidationError) as exc_info:
        await create_event(db, event_payload)

    assert exc_info.value.message == "Time out of range"
    assert await db[COLLECTION].count_documents({}) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["title", "venue", "organizer", "agenda", "tags"])
async def test_create_event_missing_required_field(db, event_payload, field):
    del event_payload[field]
    with pytest.raises(ValidationError) as exc_info:
        await create_event(db, event_payload)
    assert exc_info.value.field == field


@pytest.mark.asyncio
async def test_create_event_blank_field(db, event_payload):
    """Whitespace-only text counts as missing."""
    event_payload["description"] = "   "
    with pytest.raises(ValidationError) as exc_info:
        await create_event(db, event_payload)
    assert exc_info.value.field == "description"


@pytest.mark.asyncio
async def test_create_event_duplicate_slug(db, event_payload, test_event):
    """A second event whose title yields the same slug violates the unique index."""
    event_payload["title"] = "PyCon local meetup!"
    with pytest.raises(ConstraintViolation):
        await create_event(db, event_payload)
    assert await db[COLLECTION].count_documents({}) == 1


@pytest.mark.asyncio
async def test_update_event_without_title_keeps_slug(db, test_event):
    updated = await update_event(db, test_event.id, {"description": "New description"})

    assert updated.slug == test_event.slug
    assert updated.description == "New description"
    assert updated.updated_at >= test_event.updated_at


@pytest.mark.asyncio
async def test_update_event_same_title_keeps_custom_slug(db, test_event):
    """Re-saving with an unchanged title never regenerates the slug."""
    await db[COLLECTION].update_one({"_id": test_event.id}, {"$set": {"slug": "pycon-berlin"}})

    updated = await update_event(db, test_event.id, {"title": test_event.title, "venue": "Main Hall"})

    assert updated.slug == "pycon-berlin"


@pytest.mark.asyncio
async def test_update_event_title_regenerates_slug(db, test_event):
    updated = await update_event(db, str(test_event.id), {"title": "PyCon Winter Meetup"})

    assert updated.slug == "pycon-winter-meetup"
    fetched = await get_event_by_slug(db, "pycon-winter-meetup")
    assert fetched.id == test_event.id


@pytest.mark.asyncio
async def test_update_event_normalizes_date_and_time(db, test_event):
    updated = await update_event(db, test_event.id, {"date": "2025-12-24T09:00:00Z", "time": "12:00 AM"})

    assert updated.date == "2025-12-24"
    assert updated.time == "00:00"


@pytest.mark.asyncio
async def test_update_event_rejected_leaves_record_unchanged(db, test_event):
    with pytest.raises(ValidationError):
        await update_event(db, test_event.id, {"title": "Renamed", "time": "25:00"})

    stored = await get_event(db, test_event.id)
    assert stored.title == test_event.title
    assert stored.slug == test_event.slug
    assert stored.time == "18:30"


@pytest.mark.asyncio
async def test_update_event_not_found(db):
    with pytest.raises(NotFoundError):
        await update_event(db, ObjectId(), {"title": "Ghost"})


@pytest.mark.asyncio
async def test_get_event(db, test_event):
    event = await get_event(db, str(test_event.id))
    assert event.id == test_event.id
    assert event.title == "PyCon Local Meetup"
    assert event.agenda == ["Welcome", "Keynote", "Lightning talks"]


@pytest.mark.asyncio
@pytest.mark.parametrize("event_id", ["not-an-id", None])
async def test_get_event_malformed_id(db, event_id):
    with pytest.raises(NotFoundError):
        await get_event(db, event_id)


@pytest.mark.asyncio
async def test_get_event_not_found(db):
    with pytest.raises(NotFoundError):
        await get_event(db, ObjectId())


@pytest.mark.asyncio
async def test_get_event_by_slug_not_found(db):
    with pytest.raises(NotFoundError):
        await get_event_by_slug(db, "missing")


@pytest.mark.asyncio
async def test_list_events_pagination(db, event_payload):
    for i in range(3):
        await create_event(db, {**event_payload, "title": f"Meetup {i}"})

    events, total = await list_events(db, page=1, page_size=2)
    assert total == 3
    assert len(events) == 2

    rest, _ = await list_events(db, page=2, page_size=2)
    assert len(rest) == 1
    assert {e.slug for e in events + rest} == {"meetup-0", "meetup-1", "meetup-2"}


@pytest.mark.asyncio
@pytest.mark.parametrize("page, page_size, field", [(0, 20, "page"), (-1, 20, "page"), (1, 0, "page_size")])
async def test_list_events_rejects_bad_pagination(db, page, page_size, field):
    with pytest.raises(ValidationError) as exc_info:
        await list_events(db, page=page, page_size=page_size)
    assert exc_info.value.field == field


@pytest.mark.asyncio
async def test_delete_event(db, test_event):
    await delete_event(db, test_event.id)

    with pytest.raises(NotFoundError):
        await get_event(db, test_event.id)
    with pytest.raises(NotFoundError):
        await delete_event(db, test_event.id)
