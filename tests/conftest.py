"""Shared pytest fixtures."""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import mongomock
import pytest
from bson.binary import UUID_SUBTYPE, Binary

from medvault.config import Config
from medvault.core.core import Core


def encode_uuids(value: Any) -> Any:
    """Store UUIDs as standard BSON binary, the way AsyncMongoClient(uuidRepresentation="standard") does.

    mongomock validates documents with default codec options, which reject native UUIDs.
    """
    if isinstance(value, UUID):
        return Binary.from_uuid(value)
    if isinstance(value, dict):
        return {key: encode_uuids(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return type(value)(encode_uuids(item) for item in value)
    return value


def decode_uuids(value: Any) -> Any:
    if isinstance(value, Binary) and value.subtype == UUID_SUBTYPE:
        return value.as_uuid()
    if isinstance(value, dict):
        return {key: decode_uuids(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_uuids(item) for item in value]
    return value


class MongomockAsyncCursor:
    """Async iteration over a mongomock cursor, matching the pymongo AsyncCursor calls the services use."""

    def __init__(self, cursor: Any) -> None:
        self._cursor = cursor

    def sort(self, *args: Any, **kwargs: Any) -> "MongomockAsyncCursor":
        self._cursor = self._cursor.sort(*args, **kwargs)
        return self

    def __aiter__(self) -> "MongomockAsyncCursor":
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return decode_uuids(next(self._cursor))
        except StopIteration:
            raise StopAsyncIteration from None


class MongomockAsyncCollection:
    """Awaitable facade over a mongomock collection; filters, documents and updates go through encode_uuids."""

    def __init__(self, collection: Any) -> None:
        self._collection = collection

    def find(self, *args: Any, **kwargs: Any) -> MongomockAsyncCursor:
        return MongomockAsyncCursor(self._collection.find(*encode_uuids(args), **kwargs))

    def __getattr__(self, name: str) -> Callable[..., Awaitable[Any]]:
        method = getattr(self._collection, name)

        async def call(*args: Any, **kwargs: Any) -> Any:
            return decode_uuids(method(*encode_uuids(args), **kwargs))

        return call


class MongomockAsyncDatabase:
    def __init__(self, database: Any) -> None:
        self._database = database

    def get_collection(self, name: str) -> MongomockAsyncCollection:
        return MongomockAsyncCollection(self._database.get_collection(name))


class MongomockAsyncClient:
    """In-memory replacement for AsyncMongoClient, backed by mongomock."""

    def __init__(self) -> None:
        self._client = mongomock.MongoClient(tz_aware=True)

    def get_database(self, name: str) -> MongomockAsyncDatabase:
        return MongomockAsyncDatabase(self._client.get_database(name))

    async def aclose(self) -> None:
        self._client.close()


class FakeClock:
    """Controllable clock; starts on a whole second so MongoDB millisecond rounding is a no-op."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


class RecordingNotifier:
    """Email notifier that records codes instead of sending them."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []
        self.fail = False
        self.delay = 0.0
        self.crash: Exception | None = None

    async def send(self, address: str, code: str) -> tuple[bool, str | None]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.crash is not None:
            raise self.crash
        if self.fail:
            return False, "SMTP relay unavailable"
        self.sent.append((address, code))
        return True, None

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


OWNER_1 = UUID("87654321-4321-8765-4321-876543218765")
OWNER_2 = UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture
def config(tmp_path):
    """Test configuration with the background sweeper disabled."""
    return Config(
        database_url="mongodb://localhost:27017/medvault_test",
        host="127.0.0.1",
        port=8000,
        debug=True,
        documents_path=str(tmp_path / "documents"),
        sweep_interval_seconds=0,
        otp_send_timeout_seconds=0.2,
    )


@pytest.fixture
def clock():
    return FakeClock(datetime.now(UTC).replace(microsecond=0))


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def mongo_client():
    return MongomockAsyncClient()


@pytest.fixture
async def core(config, clock, notifier, mongo_client):
    """Started Core running against an in-memory MongoDB."""
    core = Core(config, mongo_client=mongo_client, notifier=notifier, clock=clock)
    async with core.lifespan():
        yield core


@pytest.fixture
def owner_id():
    return OWNER_1


@pytest.fixture
def other_owner_id():
    return OWNER_2


@pytest.fixture
def unlock_vault(core, notifier):
    """Request and verify a code for an owner, returning the vault session reference."""

    async def unlock(owner_id: UUID, email: str = "owner@example.com") -> str:
        (await core.services.otp.issue(owner_id, email)).unwrap()
        verified = (await core.services.otp.verify(owner_id, notifier.last_code)).unwrap()
        return verified.session_ref

    return unlock
