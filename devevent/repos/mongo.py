"""MongoDB-backed document store for events and bookings."""

from __future__ import annotations

import logging
from typing import TypeVar

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from devevent.config import Settings
from devevent.domain.errors import ConnectionFailure, UniquenessConflict
from devevent.domain.models import Booking, Document, Event

logger = logging.getLogger(__name__)

DocT = TypeVar("DocT", bound=Document)

DUPLICATE_KEY_CODE = 11000


def _is_duplicate_key(exc: PyMongoError) -> bool:
    return (
        isinstance(exc, DuplicateKeyError)
        or getattr(exc, "code", None) == DUPLICATE_KEY_CODE
        or "E11000" in str(exc)
    )


def _to_document(record: Document) -> dict:
    doc = record.model_dump(by_alias=True, exclude={"id"})
    doc["_id"] = record.id
    return doc


def _from_document(model: type[DocT], doc: dict) -> DocT:
    return model.model_validate({**doc, "id": doc["_id"]})


class _Repository:
    model: type[Document]

    def __init__(self, collection: AsyncCollection) -> None:
        self._collection = collection

    async def _write(self, record: Document, *, replace: bool) -> None:
        doc = _to_document(record)
        try:
            if replace:
                await self._collection.replace_one({"_id": record.id}, doc)
            else:
                await self._collection.insert_one(doc)
        except PyMongoError as exc:
            if _is_duplicate_key(exc):
                raise UniquenessConflict(str(exc)) from exc
            raise

    async def _find_one(self, query: dict):
        doc = await self._collection.find_one(query)
        return _from_document(self.model, doc) if doc is not None else None

    async def _find(self, query: dict) -> list:
        docs = await self._collection.find(query).to_list()
        return [_from_document(self.model, doc) for doc in docs]

    async def get(self, record_id: str):
        return await self._find_one({"_id": record_id})

    async def list_all(self) -> list:
        return await self._find({})

    async def delete(self, record_id: str) -> bool:
        result = await self._collection.delete_one({"_id": record_id})
        return result.deleted_count > 0


class MongoEventRepository(_Repository):
    model = Event

    async def insert(self, event: Event) -> Event:
        await self._write(event, replace=False)
        return event

    async def replace(self, event: Event) -> Event:
        await self._write(event, replace=True)
        return event

    async def get_by_slug(self, slug: str) -> Event | None:
        return await self._find_one({"slug": slug})

    async def exists(self, event_id: str) -> bool:
        return await self._collection.count_documents({"_id": event_id}, limit=1) > 0


class MongoBookingRepository(_Repository):
    model = Booking

    async def insert(self, booking: Booking) -> Booking:
        await self._write(booking, replace=False)
        return booking

    async def replace(self, booking: Booking) -> Booking:
        await self._write(booking, replace=True)
        return booking

    async def list_for_event(self, event_id: str) -> list[Booking]:
        return await self._find({"eventId": event_id})

    async def count_for_event(self, event_id: str) -> int:
        return await self._collection.count_documents({"eventId": event_id})


class MongoDatabase:
    """Event and booking collections of one MongoDB database."""

    def __init__(self, client: AsyncMongoClient, database: AsyncDatabase) -> None:
        self.client = client
        self.events = MongoEventRepository(database["events"])
        self.bookings = MongoBookingRepository(database["bookings"])

    async def ensure_indexes(self) -> None:
        await self.events._collection.create_index(
            [("slug", ASCENDING)], unique=True, name="slug_1"
        )
        await self.bookings._collection.create_index(
            [("eventId", ASCENDING)], name="eventId_1"
        )


async def open_mongo_database(settings: Settings) -> MongoDatabase:
    """Connect, verify the server answers, and make sure indexes exist."""
    if not settings.mongodb_uri:
        raise ConnectionFailure(
            "Please define the MONGODB_URI environment variable"
        )

    client: AsyncMongoClient = AsyncMongoClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        tz_aware=True,
    )
    try:
        await client.admin.command("ping")
        database = MongoDatabase(client, client[settings.mongodb_db])
        await database.ensure_indexes()
    except PyMongoError as exc:
        await client.close()
        raise ConnectionFailure(f"Could not connect to MongoDB: {exc}") from exc

    logger.info("Connected to MongoDB database %r", settings.mongodb_db)
    return database
