"""
Booking service with referential checks against the events collection.

MongoDB has no foreign keys, so a booking's eventId is verified with an
existence lookup immediately before the write:

  1. Schema validation: email trimmed, lowercased and shape-checked
  2. Existence check: `events` must contain eventId. Runs on create, and
     on update only when eventId actually changes
  3. Insert/update: the unique (eventId, email) index rejects a second
     booking for the same attendee, surfaced as ConstraintViolation

The check holds at the moment of the write only. Deleting an event later
does not remove its bookings.
"""

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from devevent.core.exceptions import NotFoundError, ValidationError
from devevent.core.logging import get_logger
from devevent.core.metrics import record_db_operation, record_validation_failure, write_latency
from devevent.db.base import parse_object_id, utcnow
from devevent.db.indexes import constraint_violation
from devevent.models import event
from devevent.models.booking import COLLECTION, Booking
from devevent.schemas.booking import BookingCreate, BookingUpdate

logger = get_logger(__name__)


def _parse(schema, data: Any):
    try:
        return schema.parse(data)
    except ValidationError as e:
        record_validation_failure("booking", "invalid")
        logger.warning("booking_rejected", reason=e.message, field=e.field, detail=e.detail)
        raise


async def ensure_event_exists(db: AsyncDatabase, event_id: Any) -> ObjectId:
    """Return event_id as an ObjectId if the event is stored, else raise ValidationError."""
    try:
        if not isinstance(event_id, (ObjectId, str)):
            raise TypeError(f"event id must be an ObjectId or string, got {type(event_id).__name__}")
        oid = ObjectId(event_id)
        found = await db[event.COLLECTION].find_one({"_id": oid}, {"_id": 1})
    except (InvalidId, TypeError, PyMongoError) as e:
        record_validation_failure("booking", "lookup_error")
        logger.warning("booking_event_lookup_failed", event_id=str(event_id), error=str(e))
        raise ValidationError("Invalid event id or lookup error", detail=str(e), field="eventId") from e
    record_db_operation("lookup")

    if found is None:
        record_validation_failure("booking", "missing_reference")
        logger.warning("booking_event_missing", event_id=str(oid))
        raise ValidationError(
            "Referenced event does not exist",
            detail=f"Event with ID {oid} does not exist",
            field="eventId",
        )
    return oid


async def _find_by_id(db: AsyncDatabase, booking_id: Any) -> dict:
    oid = parse_object_id(booking_id)
    document = await db[COLLECTION].find_one({"_id": oid}) if oid else None
    record_db_operation("read")
    if document is None:
        raise NotFoundError(f"Booking {booking_id} not found")
    return document


async def create_booking(db: AsyncDatabase, booking_data: Any) -> Booking:
    """Book an event for an email address."""
    data = _parse(BookingCreate, booking_data)
    event_oid = await ensure_event_exists(db, data.event_id)

    now = utcnow()
    booking = Booking(event_id=event_oid, email=data.email, created_at=now, updated_at=now)

    with write_latency.labels(collection=COLLECTION).time():
        try:
            result = await db[COLLECTION].insert_one(booking.to_document())
        except DuplicateKeyError as e:
            record_validation_failure("booking", "duplicate")
            logger.warning("booking_duplicate", event_id=str(event_oid), email=data.email)
            raise constraint_violation(COLLECTION, e) from e
    record_db_operation("write")

    booking.id = result.inserted_id
    logger.info("booking_created", booking_id=str(booking.id), event_id=str(event_oid))
    return booking


async def update_booking(db: AsyncDatabase, booking_id: Any, changes: Any) -> Booking:
    """Change a booking's event or email."""
    existing = await _find_by_id(db, booking_id)
    data = _parse(BookingUpdate, changes)

    fields: dict[str, Any] = {}
    if data.event_id is not None and parse_object_id(data.event_id) != existing["eventId"]:
        fields["eventId"] = await ensure_event_exists(db, data.event_id)
    if data.email is not None:
        fields["email"] = data.email
    fields["updatedAt"] = utcnow()

    with write_latency.labels(collection=COLLECTION).time():
        try:
            await db[COLLECTION].update_one({"_id": existing["_id"]}, {"$set": fields})
        except DuplicateKeyError as e:
            record_validation_failure("booking", "duplicate")
            logger.warning("booking_duplicate", booking_id=str(existing["_id"]))
            raise constraint_violation(COLLECTION, e) from e
    record_db_operation("write")

    booking = Booking.model_validate({**existing, **fields})
    logger.info("booking_updated", booking_id=str(booking.id), fields=sorted(fields))
    return booking


async def get_booking(db: AsyncDatabase, booking_id: Any) -> Booking:
    return Booking.model_validate(await _find_by_id(db, booking_id))


def _event_filter(event_id: Any) -> dict:
    oid = parse_object_id(event_id)
    if oid is None:
        raise ValidationError("Invalid event id", detail=str(event_id), field="eventId")
    return {"eventId": oid}


async def list_event_bookings(db: AsyncDatabase, event_id: Any) -> list[Booking]:
    """Bookings for an event, newest first. Uses the (eventId, createdAt desc) index."""
    cursor = db[COLLECTION].find(
        _event_filter(event_id),
        sort=[("createdAt", DESCENDING), ("_id", DESCENDING)],
    )
    bookings = [Booking.model_validate(document) async for document in cursor]
    record_db_operation("read")
    return bookings


async def count_event_bookings(db: AsyncDatabase, event_id: Any) -> int:
    count = await db[COLLECTION].count_documents(_event_filter(event_id))
    record_db_operation("read")
    return count


async def list_bookings_by_email(db: AsyncDatabase, email: str) -> list[Booking]:
    """All bookings made with an email address, newest first."""
    cursor = db[COLLECTION].find(
        {"email": email.strip().lower()},
        sort=[("createdAt", DESCENDING), ("_id", DESCENDING)],
    )
    bookings = [Booking.model_validate(document) async for document in cursor]
    record_db_operation("read")
    return bookings


async def delete_booking(db: AsyncDatabase, booking_id: Any) -> None:
    oid = parse_object_id(booking_id)
    result = await db[COLLECTION].delete_one({"_id": oid}) if oid else None
    if result is None or result.deleted_count == 0:
        raise NotFoundError(f"Booking {booking_id} not found")
    record_db_operation("delete")
    logger.info("booking_deleted", booking_id=str(oid))
