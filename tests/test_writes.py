"""Tests for the event and booking write paths against the in-memory store."""

from __future__ import annotations

import asyncio

import pytest

from devevent.domain.errors import (
    DanglingReference,
    InvalidValue,
    NotFound,
    UniquenessConflict,
)
from devevent.domain.models import (
    BookingCreate,
    BookingUpdate,
    EventCreate,
    EventUpdate,
)
from devevent.repos.memory import MemoryDatabase
from devevent.services import writes


def _event_payload(**overrides) -> EventCreate:
    defaults = dict(
        title="Tech Conference 2025",
        description="A conference about technology",
        overview="Join us for talks and workshops",
        image="https://example.com/image.jpg",
        venue="Convention Center",
        location="San Francisco, CA",
        date="2025-12-15T10:30:00.000Z",
        time="2:30pm",
        mode="offline",
        audience="Developers",
        agenda=["Opening keynote"],
        organizer="Tech Corp",
        tags=["tech"],
    )
    defaults.update(overrides)
    return EventCreate(**defaults)


@pytest.fixture()
def db() -> MemoryDatabase:
    return MemoryDatabase()


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


def test_persisted_event_reads_back_normalized(db):
    created = asyncio.run(writes.create_event(db, _event_payload()))
    fetched = asyncio.run(writes.get_event(db, "tech-conference-2025"))

    assert fetched.id == created.id
    assert (fetched.slug, fetched.date, fetched.time) == (
        "tech-conference-2025",
        "2025-12-15",
        "14:30",
    )
    # Saving again without changes must not move any canonical field.
    _, resaved = asyncio.run(writes.update_event(db, fetched.slug, EventUpdate()))
    assert (resaved.slug, resaved.date, resaved.time) == (
        fetched.slug,
        fetched.date,
        fetched.time,
    )
    assert resaved.created_at == created.created_at


def test_duplicate_slug_is_a_uniqueness_conflict(db):
    asyncio.run(writes.create_event(db, _event_payload()))
    with pytest.raises(UniquenessConflict):
        asyncio.run(writes.create_event(db, _event_payload(venue="Elsewhere")))
    assert len(asyncio.run(db.events.list_all())) == 1


def test_title_change_moves_slug(db):
    asyncio.run(writes.create_event(db, _event_payload()))
    previous, updated = asyncio.run(
        writes.update_event(
            db, "tech-conference-2025", EventUpdate(title="Updated Conference Name")
        )
    )
    assert previous.slug == "tech-conference-2025"
    assert updated.slug == "updated-conference-name"
    assert asyncio.run(db.events.get_by_slug("tech-conference-2025")) is None


def test_other_changes_keep_slug(db):
    asyncio.run(writes.create_event(db, _event_payload()))
    _, updated = asyncio.run(
        writes.update_event(
            db, "tech-conference-2025", EventUpdate(description="Updated description")
        )
    )
    assert updated.slug == "tech-conference-2025"
    assert updated.description == "Updated description"


def test_rename_onto_existing_slug_is_rejected_and_not_persisted(db):
    asyncio.run(writes.create_event(db, _event_payload()))
    asyncio.run(writes.create_event(db, _event_payload(title="Other Meetup")))

    with pytest.raises(UniquenessConflict):
        asyncio.run(
            writes.update_event(
                db, "other-meetup", EventUpdate(title="Tech Conference 2025")
            )
        )
    assert asyncio.run(db.events.get_by_slug("other-meetup")) is not None


def test_failed_update_leaves_stored_event_untouched(db):
    asyncio.run(writes.create_event(db, _event_payload()))

    with pytest.raises(InvalidValue):
        asyncio.run(
            writes.update_event(
                db,
                "tech-conference-2025",
                EventUpdate(description="Changed", time="25:00"),
            )
        )

    stored = asyncio.run(writes.get_event(db, "tech-conference-2025"))
    assert stored.time == "14:30"
    assert stored.description == "A conference about technology"


def test_update_unknown_event_is_not_found(db):
    with pytest.raises(NotFound):
        asyncio.run(writes.update_event(db, "nope", EventUpdate(title="x")))


def test_deleting_event_leaves_bookings_dangling(db):
    event = asyncio.run(writes.create_event(db, _event_payload()))
    booking = asyncio.run(
        writes.create_booking(
            db, BookingCreate(email="test@example.com", event_id=event.id)
        )
    )

    asyncio.run(writes.delete_event(db, event.slug))

    assert asyncio.run(db.events.exists(event.id)) is False
    kept = asyncio.run(db.bookings.get(booking.id))
    assert kept is not None
    assert kept.event_id == event.id


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


def test_two_emails_for_same_event_get_distinct_ids(db):
    event = asyncio.run(writes.create_event(db, _event_payload()))
    first = asyncio.run(
        writes.create_booking(db, BookingCreate(email="a@example.com", event_id=event.id))
    )
    second = asyncio.run(
        writes.create_booking(db, BookingCreate(email="b@example.com", event_id=event.id))
    )
    assert first.id != second.id
    assert asyncio.run(db.bookings.count_for_event(event.id)) == 2


def test_same_email_may_book_same_event_twice(db):
    # No (eventId, email) uniqueness is enforced; re-registration succeeds.
    event = asyncio.run(writes.create_event(db, _event_payload()))
    payload = BookingCreate(email="repeat@example.com", event_id=event.id)
    first = asyncio.run(writes.create_booking(db, payload))
    second = asyncio.run(writes.create_booking(db, payload))
    assert first.id != second.id


def test_same_email_may_book_different_events(db):
    one = asyncio.run(writes.create_event(db, _event_payload()))
    two = asyncio.run(writes.create_event(db, _event_payload(title="Second Event")))
    for event in (one, two):
        asyncio.run(
            writes.create_booking(
                db, BookingCreate(email="same@example.com", event_id=event.id)
            )
        )
    assert len(asyncio.run(db.bookings.list_all())) == 2


def test_booking_for_unknown_event_is_not_persisted(db):
    with pytest.raises(DanglingReference):
        asyncio.run(
            writes.create_booking(
                db, BookingCreate(email="test@example.com", event_id="missing")
            )
        )
    assert asyncio.run(db.bookings.list_all()) == []


def test_update_booking_email_is_revalidated(db):
    event = asyncio.run(writes.create_event(db, _event_payload()))
    booking = asyncio.run(
        writes.create_booking(
            db, BookingCreate(email="old@example.com", event_id=event.id)
        )
    )

    updated = asyncio.run(
        writes.update_booking(db, booking.id, BookingUpdate(email=" New@Example.com "))
    )
    assert updated.email == "new@example.com"
    assert updated.created_at == booking.created_at
    assert updated.updated_at >= booking.updated_at


def test_update_booking_after_event_deleted_is_dangling(db):
    event = asyncio.run(writes.create_event(db, _event_payload()))
    booking = asyncio.run(
        writes.create_booking(
            db, BookingCreate(email="old@example.com", event_id=event.id)
        )
    )
    asyncio.run(writes.delete_event(db, event.slug))

    with pytest.raises(DanglingReference):
        asyncio.run(
            writes.update_booking(db, booking.id, BookingUpdate(email="n@example.com"))
        )
    assert asyncio.run(db.bookings.get(booking.id)).email == "old@example.com"


def test_delete_booking(db):
    event = asyncio.run(writes.create_event(db, _event_payload()))
    booking = asyncio.run(
        writes.create_booking(
            db, BookingCreate(email="bye@example.com", event_id=event.id)
        )
    )
    asyncio.run(writes.delete_booking(db, booking.id))
    assert asyncio.run(db.bookings.get(booking.id)) is None
    with pytest.raises(NotFound):
        asyncio.run(writes.delete_booking(db, booking.id))
