"""
Event service handling CRUD operations.

Every write validates its input schema and runs the normalization
pipeline before touching the database, then issues a single-document
write. A rejected write leaves the stored document unchanged.
"""

from typing import Any, Optional

from pymongo import DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from devevent.core.exceptions import NotFoundError, ValidationError
from devevent.core.logging import get_logger
from devevent.core.metrics import record_db_operation, record_validation_failure, write_latency
from devevent.db.base import parse_object_id, utcnow
from devevent.db.indexes import constraint_violation
from devevent.models.event import COLLECTION, Event
from devevent.schemas.event import EventCreate, EventUpdate
from devevent.services.normalization import prepare_event

logger = get_logger(__name__)

EVENT_FIELDS = tuple(EventCreate.model_fields)


def _prepare(data: Any, previous: Optional[dict] = None) -> dict:
    try:
        if previous is None:
            fields = EventCreate.parse(data).model_dump()
        else:
            changes = EventUpdate.parse(data).model_dump(exclude_unset=True, exclude_none=True)
            fields = {name: previous.get(name) for name in EVENT_FIELDS}
            fields.update(changes)
        return prepare_event(fields, previous)
    except ValidationError as e:
        record_validation_failure("event", "invalid")
        logger.warning("event_rejected", reason=e.message, field=e.field, detail=e.detail)
        raise


async def _find_by_id(db: AsyncDatabase, event_id: Any) -> dict:
    oid = parse_object_id(event_id)
    document = await db[COLLECTION].find_one({"_id": oid}) if oid else None
    record_db_operation("read")
    if document is None:
        raise NotFoundError(f"Event {event_id} not found")
    return document


async def create_event(db: AsyncDatabase, event_data: Any) -> Event:
    """Validate, normalize and insert a new event."""
    fields = _prepare(event_data)
    now = utcnow()
    event = Event(**fields, created_at=now, updated_at=now)
    document = event.to_document()

    with write_latency.labels(collection=COLLECTION).time():
        try:
            result = await db[COLLECTION].insert_one(document)
        except DuplicateKeyError as e:
            record_validation_failure("event", "duplicate")
            logger.warning("event_duplicate", slug=event.slug)
            raise constraint_violation(COLLECTION, e) from e
    record_db_operation("write")

    event.id = result.inserted_id
    logger.info("event_created", event_id=str(event.id), slug=event.slug, date=event.date)
    return event


async def update_event(db: AsyncDatabase, event_id: Any, changes: Any) -> Event:
    """
    Apply a partial update. The merged record goes through the same
    pipeline as a create; the slug only changes when the title does.
    """
    existing = await _find_by_id(db, event_id)
    fields = _prepare(changes, previous=existing)
    fields["updatedAt"] = utcnow()

    with write_latency.labels(collection=COLLECTION).time():
        try:
            await db[COLLECTION].update_one({"_id": existing["_id"]}, {"$set": fields})
        except DuplicateKeyError as e:
            record_validation_failure("event", "duplicate")
            logger.warning("event_duplicate", slug=fields["slug"])
            raise constraint_violation(COLLECTION, e) from e
    record_db_operation("write")

    event = Event.model_validate({**existing, **fields})
    logger.info("event_updated", event_id=str(event.id), slug=event.slug)
    return event


async def get_event(db: AsyncDatabase, event_id: Any) -> Event:
    """Get a single event by ID."""
    return Event.model_validate(await _find_by_id(db, event_id))


async def get_event_by_slug(db: AsyncDatabase, slug: str) -> Event:
    document = await db[COLLECTION].find_one({"slug": slug})
    record_db_operation("read")
    if document is None:
        raise NotFoundError(f"Event '{slug}' not found")
    return Event.model_validate(document)


async def list_events(
    db: AsyncDatabase,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Event], int]:
    """List events newest first with pagination. Pages start at 1."""
    if page < 1:
        raise ValidationError("Invalid page", detail=f"page must be >= 1, got {page}", field="page")
    if page_size < 1:
        raise ValidationError("Invalid page size", detail=f"page_size must be >= 1, got {page_size}", field="page_size")

    total =await db[COLLECTION].count_documents({})
    cursor = db[COLLECTION].find(
        {},
        sort=[("createdAt", DESCENDING), ("_id", DESCENDING)],
        skip=(page - 1) * page_size,
        limit=page_size,
    )
    events = [Event.model_validate(document) async for document in cursor]
    record_db_operation("read")
    return events, total


async def delete_event(db: AsyncDatabase, event_id: Any) -> None:
    """Delete an event. Bookings referencing it are left in place."""
    oid = parse_object_id(event_id)
    result = await db[COLLECTION].delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise NotFoundError(f"Event {event_id} not found")
    record_db_operation("delete")
    logger.info("event_deleted", event_id=str(oid))
