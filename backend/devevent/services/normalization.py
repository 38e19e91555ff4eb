"""
Event write pipeline: slug derivation, date and time normalization.

The service layer calls `prepare_event` immediately before every insert or
update. It runs the steps in order and stops at the first failure, raising
ValidationError; nothing is written in that case. On success the returned
fields are in canonical form:

  slug  lowercase letters, digits and hyphens, unique per event
  date  YYYY-MM-DD (UTC calendar date)
  time  HH:MM, 24-hour clock
"""

import re
from datetime import date, datetime, timezone
from typing import Any, Optional

from devevent.core.exceptions import ValidationError

_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")

_TIME_PATTERN = re.compile(r"(\d{1,2}):(\d{2})(?::\d{2})?(?:\s*(AM|PM))?", re.IGNORECASE | re.ASCII)

# Tried in order after ISO 8601; month-first for numeric forms
_DATE_FORMATS = (
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%A, %B %d, %Y",
    "%a, %b %d, %Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
)


def slugify(title: str) -> str:
    slug = _SLUG_STRIP.sub("", title.lower()).strip()
    return _WHITESPACE.sub("-", slug)


def _parse_date(text: str) -> Optional[date]:
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        pass
    else:
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def normalize_date(value: str) -> str:
    parsed = _parse_date(value.strip())
    if parsed is None:
        raise ValidationError("Invalid date value", detail=f'"{value}" is not a recognizable date', field="date")
    return parsed.isoformat()


def normalize_time(value: str) -> str:
    """Convert "H:MM", "HH:MM[:SS]" or "H:MM AM/PM" to 24-hour "HH:MM"."""
    match = _TIME_PATTERN.fullmatch(value.strip())
    if not match:
        raise ValidationError(
            "Invalid time format",
            detail=f'"{value}" does not match HH:MM or HH:MM AM/PM',
            field="time",
        )

    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = (match.group(3) or "").upper()

    if meridiem == "PM" and hours != 12:
        hours += 12
    elif meridiem == "AM" and hours == 12:
        hours = 0

    if hours > 23 or minutes > 59:
        raise ValidationError("Time out of range", detail=f'"{value}"', field="time")

    return f"{hours:02d}:{minutes:02d}"


def prepare_event(fields: dict[str, Any], previous: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """
    Normalize event fields for a write.

    `previous` is the stored document for an update, None for a create.
    The slug is only regenerated when there is no previous document or the
    title differs from the stored one. The input dict is left untouched.
    """
    prepared = dict(fields)

    if previous is None or previous.get("title") != prepared["title"] or not previous.get("slug"):
        slug = slugify(prepared["title"])
        if not slug:
            raise ValidationError(
                "Title must contain at least one letter or digit",
                detail=f'"{prepared["title"]}" produces an empty slug',
                field="title",
            )
        prepared["slug"] = slug
    else:
        prepared["slug"] = previous["slug"]

    prepared["date"] = normalize_date(prepared["date"])
    prepared["time"] = normalize_time(prepared["time"])
    return prepared
