"""Write paths for events and bookings.

Every write loads whatever previous state it needs, runs the matching
validator to completion and only then commits. A validator failure leaves the
store untouched.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Union

from devevent.domain.errors import NotFound
from devevent.domain.models import (
    Booking,
    BookingCreate,
    BookingUpdate,
    Event,
    EventCreate,
    EventUpdate,
)
from devevent.services.validation import validate_booking, validate_event

if TYPE_CHECKING:
    from devevent.repos.memory import MemoryDatabase
    from devevent.repos.mongo import MongoDatabase

    Database = Union[MemoryDatabase, MongoDatabase]

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


async def create_event(db: Database, payload: EventCreate) -> Event:
    candidate = Event(**payload.model_dump())
    validate_event(candidate)
    await db.events.insert(candidate)
    logger.info("Created event %s (%s)", candidate.id, candidate.slug)
    return candidate


async def get_event(db: Database, slug: str) -> Event:
    event = await db.events.get_by_slug(slug)
    if event is None:
        raise NotFound(f"Event {slug!r} not found")
    return event


async def update_event(
    db: Database, slug: str, changes: EventUpdate
) -> tuple[Event, Event]:
    """Apply *changes* to the event at *slug*; returns ``(previous, updated)``."""
    previous = await get_event(db, slug)
    candidate = previous.model_copy(
        update=changes.model_dump(exclude_unset=True), deep=True
    )
    validate_event(candidate, previous)
    candidate.updated_at = _utcnow()
    await db.events.replace(candidate)
    logger.info("Updated event %s (%s -> %s)", candidate.id, slug, candidate.slug)
    return previous, candidate


async def delete_event(db: Database, slug: str) -> Event:
    """Remove the event. Its bookings are left in place and keep their eventId."""
    event = await get_event(db, slug)
    await db.events.delete(event.id)
    remaining = await db.bookings.count_for_event(event.id)
    if remaining:
        logger.warning(
            "Deleted event %s still has %d booking(s) referencing it",
            event.id,
            remaining,
        )
    return event


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


async def create_booking(db: Database, payload: BookingCreate) -> Booking:
    candidate = Booking(email=payload.email or "", event_id=payload.event_id)
    await validate_booking(candidate, db.events)
    await db.bookings.insert(candidate)
    logger.info("Created booking %s for event %s", candidate.id, candidate.event_id)
    return candidate


async def get_booking(db: Database, booking_id: str) -> Booking:
    booking = await db.bookings.get(booking_id)
    if booking is None:
        raise NotFound(f"Booking {booking_id!r} not found")
    return booking


async def update_booking(
    db: Database, booking_id: str, changes: BookingUpdate
) -> Booking:
    candidate = await get_booking(db, booking_id)
    candidate.email = changes.email
    await validate_booking(candidate, db.events)
    candidate.updated_at = _utcnow()
    await db.bookings.replace(candidate)
    return candidate


async def delete_booking(db: Database, booking_id: str) -> Booking:
    booking = await get_booking(db, booking_id)
    await db.bookings.delete(booking_id)
    return booking
