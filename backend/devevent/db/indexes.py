"""
Index management and duplicate-key translation.

Index definitions live next to each model; `ensure_indexes` creates them
all. create_index is idempotent, so this is safe to call on every startup.
"""

from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from devevent.core.exceptions import ConstraintViolation
from devevent.core.logging import get_logger
from devevent.models import booking, event

logger = get_logger(__name__)

MODEL_INDEXES = {
    event.COLLECTION: event.INDEXES,
    booking.COLLECTION: booking.INDEXES,
}

DUPLICATE_MESSAGES = {
    event.COLLECTION: "An event with this slug already exists",
    booking.COLLECTION: "A booking for this event and email already exists",
}


async def ensure_indexes(db: AsyncDatabase) -> None:
    for collection, indexes in MODEL_INDEXES.items():
        for keys, options in indexes:
            await db[collection].create_index(keys, **options)
        logger.info("indexes_ensured", collection=collection, count=len(indexes))


def constraint_violation(collection: str, error: DuplicateKeyError) -> ConstraintViolation:
    """Translate a driver DuplicateKeyError into the application's error type."""
    details = error.details or {}
    return ConstraintViolation(
        DUPLICATE_MESSAGES.get(collection, "Duplicate key"),
        detail=str(error),
        key=details.get("keyValue"),
    )
