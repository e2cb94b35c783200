import asyncio
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medvault.core.core import Service
from medvault.core.locks import OwnerLocks
from medvault.core.modules.otp.generator import generate_otp_code
from medvault.core.modules.otp.models import IssueReceipt, VerifiedAccess
from medvault.core.modules.vault_session.models import VaultSession
from medvault.core.result import Result
from medvault.errors import (
    InvalidOrExpiredCodeError,
    IssuanceFailedError,
    RateLimitedError,
    ValidationError,
)
from medvault.utils import is_otp_code

logger = structlog.get_logger(__name__)


class OtpService(Service):
    """Issues and verifies the one-time codes that open the vault."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._owner_locks = OwnerLocks()

    async def issue(self, owner_id: UUID, email: str) -> Result[IssueReceipt]:
        """Create a pending vault session for the owner and email its code.

        Issuance for one owner is serialized; different owners never wait on each other.
        A session whose code could not be delivered is discarded again.
        """
        if not email or not email.strip():
            return Result.failure(ValidationError("A contact email address is required"))

        async with self._owner_locks.hold(owner_id):
            return await self._issue_locked(owner_id, email.strip())

    async def _issue_locked(self, owner_id: UUID, email: str) -> Result[IssueReceipt]:
        config = self.core.config
        store = self.core.services.vault_session
        moment = self.core.now()

        try:
            pending = await store.count_pending_sessions(owner_id, moment)
            if pending >= config.otp_max_pending_sessions:
                logger.info("otp_rate_limited", owner_id=owner_id, pending=pending)
                return Result.failure(RateLimitedError())

            code = generate_otp_code(exclude=await store.get_live_codes(owner_id, moment))
            session = await store.create_session(
                VaultSession(
                    owner_id=owner_id,
                    email=email,
                    code=code,
                    issued_at=moment,
                    expires_at=moment + timedelta(seconds=config.otp_ttl_seconds),
                )
            )
        except PyMongoError:
            logger.exception("otp_session_store_failed", owner_id=owner_id)
            return Result.failure(IssuanceFailedError("Failed to create vault session"))

        sent, error = await self._dispatch(email, code)
        if not sent:
            await self._discard(session)
            logger.warning("otp_issuance_failed", owner_id=owner_id, session_id=session.id, error=error)
            return Result.failure(IssuanceFailedError())

        logger.info("otp_issued", owner_id=owner_id, session_id=session.id, expires_at=session.expires_at)
        return Result.success(
            IssueReceipt(expires_at=session.expires_at, code=code if config.debug_echo_otp else None)
        )

    async def _dispatch(self, email: str, code: str) -> tuple[bool, str | None]:
        """Send the code, bounded by the configured timeout."""
        try:
            return await asyncio.wait_for(
                self.core.notifier.send(email, code), timeout=self.core.config.otp_send_timeout_seconds
            )
        except TimeoutError:
            return False, "Email notifier timed out"
        except Exception as e:
            logger.exception("otp_dispatch_error", error=str(e))
            return False, str(e)

    async def _discard(self, session: VaultSession) -> None:
        try:
            await self.core.services.vault_session.discard_pending_session(session.id)
        except PyMongoError:
            # Left unverified; the sweeper reclaims it after expiry
            logger.exception("otp_session_discard_failed", session_id=session.id)

    async def verify(self, owner_id: UUID, code: str) -> Result[VerifiedAccess]:
        """Verify a submitted code against the owner's own sessions.

        The newest pending unexpired session carrying the code is flipped to verified.
        Re-submitting the code of an already verified session succeeds again without
        touching its expiry, and never unlocks a second session with the same code.
        """
        code = code.strip()
        if not is_otp_code(code):
            return Result.failure(ValidationError("Code must be exactly 6 digits"))

        store = self.core.services.vault_session
        moment = self.core.now()

        consumed = await self._resolve_consumed(owner_id, code, moment)
        if consumed is not None:
            return consumed

        session = await store.mark_verified(owner_id, code, moment)
        if session is None:
            # A concurrent attempt may have flipped the same session first
            consumed = await self._resolve_consumed(owner_id, code, moment)
            if consumed is not None:
                return consumed
            logger.info("otp_verification_failed", owner_id=owner_id)
            return Result.failure(InvalidOrExpiredCodeError())

        logger.info("otp_verified", owner_id=owner_id, session_id=session.id, expires_at=session.expires_at)
        return Result.success(VerifiedAccess(session_ref=session.ref, expires_at=session.expires_at))

    async def _resolve_consumed(self, owner_id: UUID, code: str, moment: datetime) -> Result[VerifiedAccess] | None:
        """Idempotent outcome for a code that already verified a still valid session."""
        consumed = await self.core.services.vault_session.find_consumed_session(owner_id, code, moment)
        if consumed is None:
            return None
        return Result.success(VerifiedAccess(session_ref=consumed.ref, expires_at=consumed.expires_at))
