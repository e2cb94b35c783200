from datetime import datetime
from typing import Any
from uuid import UUID

import structlog
from pymongo import ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from medvault.core.core import Service
from medvault.core.modules.vault_session.models import VaultSession

logger = structlog.get_logger(__name__)


class VaultSessionService(Service):
    """Session store for vault access sessions.

    Every lookup is scoped to an owner. Expiry is always evaluated against the
    supplied moment inside the query, so no validity is ever cached.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("vault_sessions")

    async def on_start(self) -> None:
        """Create indexes on startup."""
        await self._collection.create_index([("ref", 1)], unique=True)
        await self._collection.create_index([("owner_id", 1), ("code", 1)])
        await self._collection.create_index([("owner_id", 1), ("issued_at", -1)])
        # Server-side hygiene, same cutoff as the sweeper: expires_at + grace
        if self.core.config.session_ttl_index:
            await self._collection.create_index(
                [("expires_at", 1)], expireAfterSeconds=self.core.config.session_grace_seconds
            )

    async def create_session(self, session: VaultSession) -> VaultSession:
        await self._collection.insert_one(session.to_mongo())
        return session

    async def discard_pending_session(self, session_id: UUID) -> bool:
        """Delete a session that was never verified, used when its code could not be delivered."""
        result = await self._collection.delete_one({"_id": session_id, "verified": False})
        return result.deleted_count > 0

    async def count_pending_sessions(self, owner_id: UUID, moment: datetime) -> int:
        """Count unexpired, unverified sessions of an owner."""
        return await self._collection.count_documents(
            {"owner_id": owner_id, "verified": False, "expires_at": {"$gt": moment}}
        )

    async def get_live_codes(self, owner_id: UUID, moment: datetime) -> set[str]:
        """Codes held by the owner's unexpired sessions, verified or not."""
        cursor = self._collection.find({"owner_id": owner_id, "expires_at": {"$gt": moment}})
        return {session.code for session in await VaultSession.list_cursor(cursor)}

    async def find_consumed_session(self, owner_id: UUID, code: str, moment: datetime) -> VaultSession | None:
        """Unexpired session of the owner that this code has already verified."""
        doc = await self._collection.find_one(
            {"owner_id": owner_id, "code": code, "verified": True, "expires_at": {"$gt": moment}},
            sort=[("issued_at", -1)],
        )
        if doc is None:
            return None
        return VaultSession.model_validate(doc)

    async def mark_verified(self, owner_id: UUID, code: str, moment: datetime) -> VaultSession | None:
        """Atomically flip the newest matching pending session to verified.

        Only verified and verified_at are written, so concurrent attempts can at
        worst set the flag twice and never touch owner_id or expires_at.
        """
        doc = await self._collection.find_one_and_update(
            {"owner_id": owner_id, "code": code, "verified": False, "expires_at": {"$gt": moment}},
            {"$set": {"verified": True, "verified_at": moment}},
            sort=[("issued_at", -1)],
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return None
        return VaultSession.model_validate(doc)

    async def find_active_session(self, owner_id: UUID, ref: str, moment: datetime) -> VaultSession | None:
        """Session with this reference that currently authorizes the owner, if any."""
        doc = await self._collection.find_one(
            {"owner_id": owner_id, "ref": ref, "verified": True, "expires_at": {"$gt": moment}}
        )
        if doc is None:
            return None
        return VaultSession.model_validate(doc)

    async def delete_expired_sessions(self, cutoff: datetime) -> int:
        """Delete sessions that expired before the cutoff and return how many were removed."""
        result = await self._collection.delete_many({"expires_at": {"$lt": cutoff}})
        return result.deleted_count
