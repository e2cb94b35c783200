"""Login session models."""

from datetime import datetime
from typing import NewType
from uuid import UUID

from pydantic import Field

from medvault.core.db import MongoModel
from medvault.utils import now

AuthToken = NewType("AuthToken", str)


class Session(MongoModel):
    """User authentication session.

    Indexed on auth_token - unique, user_id, created_at (TTL 30 days).
    Proves identity only; opening the vault additionally needs a verified VaultSession.
    """

    user_id: UUID
    auth_token: str
    created_at: datetime = Field(default_factory=now)
