from uuid import UUID

from pydantic import BaseModel, Field

from medvault.core.db import MongoModel


class User(MongoModel):
    """Account owning vault sessions and documents."""

    email: str  # Verified contact address, one-time codes are sent here
    password_hash: str  # bcrypt hash


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Contact email address")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email)
