from uuid import UUID

import structlog

from medvault.core.core import Service
from medvault.core.modules.session.models import AuthToken
from medvault.core.modules.user.models import User
from medvault.core.modules.vault_session.models import VaultSession, VaultStatus
from medvault.core.result import Result
from medvault.errors import VaultLockedError

logger = structlog.get_logger(__name__)


class AccessService(Service):
    """Authentication checks and the vault access gate."""

    async def ensure_authenticated(self, auth_token: AuthToken) -> User:
        """Ensure the user is authenticated."""
        return await self.core.services.session.get_authenticated_user(auth_token)

    async def check_vault_access(self, owner_id: UUID, session_ref: str | None) -> Result[VaultSession]:
        """Admit a vault call only with a verified, unexpired session of the same owner.

        Evaluated against the store on every call; nothing about a previous
        successful check is remembered, so expiry takes effect immediately.
        """
        if not session_ref:
            return Result.failure(VaultLockedError())

        moment = self.core.now()
        session = await self.core.services.vault_session.find_active_session(owner_id, session_ref, moment)
        if session is None or not session.is_active(moment):
            logger.debug("vault_locked", owner_id=owner_id)
            return Result.failure(VaultLockedError("Vault session is invalid or expired"))
        return Result.success(session)

    async def vault_status(self, owner_id: UUID, session_ref: str | None) -> VaultStatus:
        """Report whether the session reference opens the vault, without failing."""
        access = await self.check_vault_access(owner_id, session_ref)
        if access.value is None:
            return VaultStatus(unlocked=False)
        return VaultStatus(unlocked=True, expires_at=access.value.expires_at)
