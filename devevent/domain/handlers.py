"""Domain event handlers, wired up at application startup."""

from __future__ import annotations

from devevent.domain.bus import EventBus
from devevent.domain.events import (
    BookingCreated,
    BookingDeleted,
    EventCreated,
    EventDeleted,
    EventUpdated,
)
from devevent.services.pages import EVENTS_PATH, PageCache, event_path
from devevent.services.telemetry import TelemetrySink


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the page cache
    and the telemetry sink."""

    def __init__(
        self,
        bus: EventBus,
        page_cache: PageCache,
        telemetry: TelemetrySink,
    ) -> None:
        self.bus = bus
        self.page_cache = page_cache
        self.telemetry = telemetry
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventCreated, self.on_event_created)
        self.bus.subscribe(EventUpdated, self.on_event_updated)
        self.bus.subscribe(EventDeleted, self.on_event_deleted)
        self.bus.subscribe(BookingCreated, self.on_booking_created)
        self.bus.subscribe(BookingDeleted, self.on_booking_deleted)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_created(self, event: EventCreated) -> None:
        self.page_cache.invalidate(EVENTS_PATH)
        self.page_cache.invalidate(event_path(event.slug))
        self.telemetry.capture(
            "event_created", {"event_id": event.event_id, "slug": event.slug}
        )

    def on_event_updated(self, event: EventUpdated) -> None:
        self.page_cache.invalidate(EVENTS_PATH)
        self.page_cache.invalidate(event_path(event.slug))
        if event.previous_slug != event.slug:
            self.page_cache.invalidate(event_path(event.previous_slug))
        self.telemetry.capture("event_updated", {"event_id": event.event_id})

    def on_event_deleted(self, event: EventDeleted) -> None:
        self.page_cache.invalidate(EVENTS_PATH)
        self.page_cache.invalidate(event_path(event.slug))
        self.telemetry.capture("event_deleted", {"event_id": event.event_id})

    def on_booking_created(self, event: BookingCreated) -> None:
        self.telemetry.capture(
            "booking_created",
            {"booking_id": event.booking_id, "event_id": event.event_id},
        )

    def on_booking_deleted(self, event: BookingDeleted) -> None:
        self.telemetry.capture("booking_deleted", {"booking_id": event.booking_id})
