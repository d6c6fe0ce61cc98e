"""FastAPI application: entry point for the event listing and RSVP service."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from devevent.config import load_settings
from devevent.domain.bus import EventBus
from devevent.domain.errors import (
    ConnectionFailure,
    InvalidEmailFormat,
    NotFound,
    UniquenessConflict,
    ValidationFailure,
)
from devevent.domain.events import (
    BookingCreated,
    BookingDeleted,
    EventCreated,
    EventDeleted,
    EventUpdated,
)
from devevent.domain.handlers import HandlerRegistry
from devevent.domain.models import (
    BookingCreate,
    BookingUpdate,
    Document,
    EventCreate,
    EventUpdate,
    RevalidateRequest,
)
from devevent.logging_config import setup_logging
from devevent.repos.connection import ConnectionManager
from devevent.repos.memory import open_memory_database
from devevent.repos.mongo import open_mongo_database
from devevent.services import writes
from devevent.services.pages import EVENTS_PATH, PageCache, event_path
from devevent.services.telemetry import TelemetrySink

settings = load_settings()
setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="DevEvent Service")


async def open_database():
    if settings.database_backend == "memory":
        return await open_memory_database()
    return await open_mongo_database(settings)


# ── Singletons (created at import time, shared by every request) ──────
connections = ConnectionManager(open_database)
event_bus = EventBus()
page_cache = PageCache(revalidate_seconds=settings.page_revalidate_seconds)
telemetry = TelemetrySink()

handler_registry = HandlerRegistry(
    bus=event_bus,
    page_cache=page_cache,
    telemetry=telemetry,
)


def _dump(record: Document) -> dict:
    return record.model_dump(mode="json", by_alias=True)


# ── Error mapping ─────────────────────────────────────────────────────


def _error(status_code: int, message: str, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, "error": error})


@app.exception_handler(ValidationFailure)
async def _on_validation_failure(request: Request, exc: ValidationFailure) -> JSONResponse:
    return _error(400, "Validation failed", str(exc))


@app.exception_handler(RequestValidationError)
async def _on_bad_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
        for err in exc.errors()
    )
    return _error(400, "Invalid request body", problems)


@app.exception_handler(NotFound)
async def _on_not_found(request: Request, exc: NotFound) -> JSONResponse:
    return _error(404, "Not found", str(exc))


@app.exception_handler(UniquenessConflict)
async def _on_conflict(request: Request, exc: UniquenessConflict) -> JSONResponse:
    logger.info("Uniqueness conflict on %s: %s", request.url.path, exc)
    return _error(409, "Duplicate record", "A record with the same unique key already exists")


@app.exception_handler(ConnectionFailure)
async def _on_connection_failure(request: Request, exc: ConnectionFailure) -> JSONResponse:
    logger.error("Store unavailable while handling %s: %s", request.url.path, exc)
    return _error(500, "Database unavailable", "Could not reach the document store")


@app.exception_handler(Exception)
async def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected failure while handling %s", request.url.path)
    return _error(500, "Internal server error", type(exc).__name__)


# ── Routes: events ────────────────────────────────────────────────────


@app.get("/events")
async def list_events() -> dict:
    """Return all events, newest first. Served from the page cache when fresh."""
    events = page_cache.get(EVENTS_PATH)
    if events is None:
        db = await connections.get()
        stored = await db.events.list_all()
        stored.sort(key=lambda e: e.created_at, reverse=True)
        events = [_dump(e) for e in stored]
        page_cache.put(EVENTS_PATH, events)
    return {"message": "Events retrieved successfully", "events": events}


@app.post("/events", status_code=201)
async def create_event(payload: EventCreate) -> dict:
    db = await connections.get()
    event = await writes.create_event(db, payload)
    event_bus.publish(EventCreated(event_id=event.id, slug=event.slug))
    return {"message": "Event created successfully", "event": _dump(event)}


@app.get("/events/{slug}")
async def get_event(slug: str) -> dict:
    path = event_path(slug)
    event = page_cache.get(path)
    if event is None:
        db = await connections.get()
        event = _dump(await writes.get_event(db, slug))
        page_cache.put(path, event)
    return {"message": "Event retrieved successfully", "event": event}


@app.patch("/events/{slug}")
async def update_event(slug: str, changes: EventUpdate) -> dict:
    db = await connections.get()
    previous, event = await writes.update_event(db, slug, changes)
    event_bus.publish(
        EventUpdated(event_id=event.id, slug=event.slug, previous_slug=previous.slug)
    )
    return {"message": "Event updated successfully", "event": _dump(event)}


@app.delete("/events/{slug}")
async def delete_event(slug: str) -> dict:
    db = await connections.get()
    event = await writes.delete_event(db, slug)
    event_bus.publish(EventDeleted(event_id=event.id, slug=event.slug))
    return {"message": "Event deleted successfully"}


@app.get("/events/{slug}/bookings")
async def list_event_bookings(slug: str) -> dict:
    db = await connections.get()
    event = await writes.get_event(db, slug)
    bookings = await db.bookings.list_for_event(event.id)
    return {
        "message": "Bookings retrieved successfully",
        "bookings": [_dump(b) for b in bookings],
        "count": len(bookings),
    }


# ── Routes: bookings ──────────────────────────────────────────────────


@app.post("/bookings", status_code=201)
async def create_booking(payload: BookingCreate) -> dict:
    if not payload.email:
        raise InvalidEmailFormat("Email is required")
    db = await connections.get()
    booking = await writes.create_booking(db, payload)
    event_bus.publish(BookingCreated(booking_id=booking.id, event_id=booking.event_id))
    return {"message": "Booking created successfully", "booking": _dump(booking)}


@app.get("/bookings")
async def list_bookings() -> dict:
    db = await connections.get()
    bookings = await db.bookings.list_all()
    return {
        "message": "Bookings retrieved successfully",
        "bookings": [_dump(b) for b in bookings],
    }


@app.patch("/bookings/{booking_id}")
async def update_booking(booking_id: str, changes: BookingUpdate) -> dict:
    db = await connections.get()
    booking = await writes.update_booking(db, booking_id, changes)
    return {"message": "Booking updated successfully", "booking": _dump(booking)}


@app.delete("/bookings/{booking_id}")
async def delete_booking(booking_id: str) -> dict:
    db = await connections.get()
    booking = await writes.delete_booking(db, booking_id)
    event_bus.publish(BookingDeleted(booking_id=booking.id, event_id=booking.event_id))
    return {"message": "Booking deleted successfully"}


# ── Routes: misc ──────────────────────────────────────────────────────


@app.post("/revalidate")
async def revalidate(body: RevalidateRequest) -> JSONResponse:
    """Mark the cached rendering of *path* stale."""
    if not body.path:
        return JSONResponse(status_code=400, content={"message": "Missing path parameter"})
    page_cache.invalidate(body.path)
    return JSONResponse(
        status_code=200,
        content={"message": f"Path {body.path} revalidated successfully"},
    )


@app.get("/health")
async def health() -> dict:
    return {"status": "ok", "database_connected": connections.connected}
