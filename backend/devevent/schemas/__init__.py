from devevent.schemas.event import EventCreate, EventUpdate
from devevent.schemas.booking import BookingCreate, BookingUpdate

__all__ = [
    "EventCreate", "EventUpdate",
    "BookingCreate", "BookingUpdate",
]
