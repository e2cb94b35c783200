from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from uuid import UUID

from medvault.core.core import Core
from medvault.core.modules.document.models import Document, DocumentFileInfo
from medvault.core.modules.otp.models import IssueReceipt, VerifiedAccess
from medvault.core.modules.session.models import AuthToken
from medvault.core.modules.user.models import UserView
from medvault.core.modules.vault_session.models import VaultSessionRef, VaultStatus
from medvault.errors import AuthenticationError


class App:
    """Facade for all application operations.

    Resolves the authenticated owner, delegates to Core and unwraps vault results,
    raising their UserError for the web layer.
    """

    def __init__(self, core: Core) -> None:
        self._core = core

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    async def is_auth_token_valid(self, auth_token: AuthToken) -> bool:
        """Check if authentication token is valid."""
        return await self._core.services.session.is_auth_token_valid(auth_token)

    async def login(self, email: str, password: str) -> AuthToken:
        """Authenticate user and create session."""
        user = await self._core.services.user.verify_password(email, password)
        if user is None:
            raise AuthenticationError
        return await self._core.services.session.create_session(user.id)

    async def logout(self, auth_token: AuthToken) -> None:
        """Invalidate login session."""
        await self._core.services.access.ensure_authenticated(auth_token)
        await self._core.services.session.invalidate_session(auth_token)

    async def get_current_user(self, auth_token: AuthToken) -> UserView:
        """Get current authenticated user profile."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return UserView.from_domain(current_user)

    # === Vault access ===
    async def request_vault_access(self, auth_token: AuthToken) -> IssueReceipt:
        """Send a one-time code to the current user's email address."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        result = await self._core.services.otp.issue(current_user.id, current_user.email)
        return result.unwrap()

    async def verify_vault_access(self, auth_token: AuthToken, code: str) -> VerifiedAccess:
        """Exchange a one-time code for a vault session reference."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        result = await self._core.services.otp.verify(current_user.id, code)
        return result.unwrap()

    async def get_vault_status(self, auth_token: AuthToken, session_ref: VaultSessionRef | None) -> VaultStatus:
        """Report whether the vault session reference currently opens the vault."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        return await self._core.services.access.vault_status(current_user.id, session_ref)

    # === Vault documents ===
    async def list_documents(self, auth_token: AuthToken, session_ref: VaultSessionRef | None) -> list[Document]:
        """List vault documents, newest first (verified vault session required)."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        result = await self._core.services.document.list_documents(current_user.id, session_ref)
        return result.unwrap()

    async def create_document(
        self,
        auth_token: AuthToken,
        session_ref: VaultSessionRef | None,
        name: str,
        file_type: str | None,
        content: bytes,
    ) -> Document:
        """Upload a document into the vault (verified vault session required)."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        result = await self._core.services.document.create_document(current_user.id, session_ref, name, file_type, content)
        return result.unwrap()

    async def delete_document(self, auth_token: AuthToken, session_ref: VaultSessionRef | None, document_id: UUID) -> None:
        """Delete a vault document (verified vault session required)."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        result = await self._core.services.document.delete_document(current_user.id, session_ref, document_id)
        result.unwrap()

    async def get_document_file_info(
        self, auth_token: AuthToken, session_ref: VaultSessionRef | None, document_id: UUID
    ) -> DocumentFileInfo:
        """Locate a document payload for download (verified vault session required)."""
        current_user = await self._core.services.access.ensure_authenticated(auth_token)
        result = await self._core.services.document.get_document_file_info(current_user.id, session_ref, document_id)
        return result.unwrap()
