"""Domain events emitted after successful writes."""

from __future__ import annotations

from pydantic import BaseModel


class EventCreated(BaseModel):
    """Fired when a new Event is persisted."""

    event_id: str
    slug: str


class EventUpdated(BaseModel):
    """Fired after an Event is re-validated and saved.

    ``previous_slug`` differs from ``slug`` when the title change moved it.
    """

    event_id: str
    slug: str
    previous_slug: str


class EventDeleted(BaseModel):
    event_id: str
    slug: str


class BookingCreated(BaseModel):
    """Fired when an email RSVPs to an event."""

    booking_id: str
    event_id: str


class BookingDeleted(BaseModel):
    booking_id: str
    event_id: str | None = None
