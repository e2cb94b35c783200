import asyncio
import contextlib
from datetime import timedelta
from typing import Any

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from medvault.core.core import Service

logger = structlog.get_logger(__name__)


class SweeperService(Service):
    """Periodically removes vault sessions that expired more than the grace period ago.

    Storage hygiene only: the access gate checks expiry on every call, so a
    stopped or lagging sweeper never keeps the vault open.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._task: asyncio.Task[None] | None = None

    async def on_start(self) -> None:
        interval = self.core.config.sweep_interval_seconds
        if interval > 0:
            self._task = asyncio.create_task(self._run(interval), name="vault-session-sweeper")
            logger.debug("sweeper_started", interval=interval)

    async def on_stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def sweep_expired_sessions(self) -> int:
        """Delete sessions past expires_at + grace and return how many were removed."""
        cutoff = self.core.now() - timedelta(seconds=self.core.config.session_grace_seconds)
        deleted = await self.core.services.vault_session.delete_expired_sessions(cutoff)
        if deleted:
            logger.info("sessions_swept", count=deleted, cutoff=cutoff)
        return deleted

    async def _run(self, interval: int) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await self.sweep_expired_sessions()
            except PyMongoError:
                logger.exception("session_sweep_failed")
