"""In-memory document store for events and bookings."""

from __future__ import annotations

from devevent.domain.errors import UniquenessConflict
from devevent.domain.models import Booking, Event


class EventRepository:
    """Dict-backed store for Event instances, keyed by id, unique on slug."""

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def _check_slug(self, event: Event) -> None:
        for other in self._store.values():
            if other.slug == event.slug and other.id != event.id:
                raise UniquenessConflict(
                    f"E11000 duplicate key error collection: events "
                    f'index: slug_1 dup key: {{ slug: "{event.slug}" }}'
                )

    async def insert(self, event: Event) -> Event:
        if event.id in self._store:
            raise UniquenessConflict(f"E11000 duplicate key error: _id {event.id}")
        self._check_slug(event)
        self._store[event.id] = event.model_copy(deep=True)
        return event

    async def replace(self, event: Event) -> Event:
        self._check_slug(event)
        self._store[event.id] = event.model_copy(deep=True)
        return event

    async def get(self, event_id: str) -> Event | None:
        stored = self._store.get(event_id)
        return stored.model_copy(deep=True) if stored is not None else None

    async def get_by_slug(self, slug: str) -> Event | None:
        for event in self._store.values():
            if event.slug == slug:
                return event.model_copy(deep=True)
        return None

    async def exists(self, event_id: str) -> bool:
        return event_id in self._store

    async def list_all(self) -> list[Event]:
        return [e.model_copy(deep=True) for e in self._store.values()]

    async def delete(self, event_id: str) -> bool:
        return self._store.pop(event_id, None) is not None


class BookingRepository:
    """Dict-backed store for Booking instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Booking] = {}

    async def insert(self, booking: Booking) -> Booking:
        if booking.id in self._store:
            raise UniquenessConflict(f"E11000 duplicate key error: _id {booking.id}")
        self._store[booking.id] = booking.model_copy(deep=True)
        return booking

    async def replace(self, booking: Booking) -> Booking:
        self._store[booking.id] = booking.model_copy(deep=True)
        return booking

    async def get(self, booking_id: str) -> Booking | None:
        stored = self._store.get(booking_id)
        return stored.model_copy(deep=True) if stored is not None else None

    async def list_all(self) -> list[Booking]:
        return [b.model_copy(deep=True) for b in self._store.values()]

    async def list_for_event(self, event_id: str) -> list[Booking]:
        return [
            b.model_copy(deep=True)
            for b in self._store.values()
            if b.event_id == event_id
        ]

    async def count_for_event(self, event_id: str) -> int:
        return sum(1 for b in self._store.values() if b.event_id == event_id)

    async def delete(self, booking_id: str) -> bool:
        return self._store.pop(booking_id, None) is not None


class MemoryDatabase:
    """Both collections, shaped like the MongoDB-backed database."""

    def __init__(self) -> None:
        self.events = EventRepository()
        self.bookings = BookingRepository()


async def open_memory_database() -> MemoryDatabase:
    return MemoryDatabase()
