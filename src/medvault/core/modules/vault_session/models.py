"""Vault access session models."""

import secrets
from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import BaseModel, Field

from medvault.core.db import MongoModel

VaultSessionRef = NewType("VaultSessionRef", str)


def new_session_ref() -> str:
    return secrets.token_urlsafe(32)


class VaultSession(MongoModel):
    """One-time-code session guarding the document vault.

    Authorizes vault calls only while verified and before expires_at. The verified
    flag flips once from False to True and never back; expires_at never changes.
    Indexed on ref - unique, (owner_id, code), (owner_id, issued_at), expires_at (TTL grace).
    """

    owner_id: UUID
    email: str  # Address the code was dispatched to
    code: str  # Six-digit zero-padded numeric code
    ref: str = Field(default_factory=new_session_ref)  # Handed out only after verification
    issued_at: datetime
    expires_at: datetime
    verified: bool = False
    verified_at: datetime | None = None

    def is_active(self, moment: datetime) -> bool:
        return self.verified and moment < self.expires_at


class VaultStatus(BaseModel):
    """Whether a vault session reference currently opens the vault."""

    unlocked: bool = Field(..., description="True while the session is verified and unexpired")
    expires_at: datetime | None = Field(None, description="When the vault locks again")
