"""Pre-write guards for Event and Booking records.

Both validators run to completion before anything is committed. They mutate
the candidate in place (normalized fields) and return it; any failure raises a
``ValidationFailure`` subclass and the caller must not persist the record.
"""

from __future__ import annotations

import re
from typing import Protocol

from devevent.domain.errors import (
    DanglingReference,
    EmptyCollection,
    InvalidEmailFormat,
    MissingReference,
    RequiredFieldEmpty,
)
from devevent.domain.models import Booking, Event
from devevent.services.normalize import normalize_date, normalize_time, slugify

REQUIRED_STRING_FIELDS = (
    "title",
    "slug",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "date",
    "time",
    "mode",
    "audience",
    "organizer",
)

COLLECTION_FIELDS = ("agenda", "tags")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$", re.IGNORECASE)


class EventLookup(Protocol):
    async def exists(self, event_id: str) -> bool: ...


def _is_blank(value: object) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_event(candidate: Event, previous: Event | None = None) -> Event:
    """Normalize and check *candidate* against its last persisted state.

    The slug is recomputed for new records and whenever the title changed.
    """
    for field in REQUIRED_STRING_FIELDS:
        value = getattr(candidate, field)
        if isinstance(value, str):
            setattr(candidate, field, value.strip())

    title_changed = previous is None or previous.title != candidate.title
    if isinstance(candidate.title, str) and (title_changed or not candidate.slug):
        candidate.slug = slugify(candidate.title)

    # Blank values are reported as missing fields below, not as bad formats.
    if not _is_blank(candidate.date):
        candidate.date = normalize_date(candidate.date)
    if not _is_blank(candidate.time):
        candidate.time = normalize_time(candidate.time)

    for field in REQUIRED_STRING_FIELDS:
        if _is_blank(getattr(candidate, field)):
            raise RequiredFieldEmpty(field)

    for field in COLLECTION_FIELDS:
        items = getattr(candidate, field)
        if (
            not isinstance(items, list)
            or not items
            or any(_is_blank(item) for item in items)
        ):
            raise EmptyCollection(field)

    return candidate


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def validate_booking(candidate: Booking, events: EventLookup) -> Booking:
    """Check that *candidate* points at an existing event and has a sane email.

    The existence check is point-in-time: an event deleted between this call
    and the booking's commit is not detected.
    """
    if isinstance(candidate.email, str):
        candidate.email = normalize_email(candidate.email)

    if _is_blank(candidate.event_id):
        raise MissingReference()

    if not await events.exists(candidate.event_id):
        raise DanglingReference(candidate.event_id)

    if not isinstance(candidate.email, str) or not EMAIL_PATTERN.match(
        candidate.email
    ):
        raise InvalidEmailFormat()

    return candidate
