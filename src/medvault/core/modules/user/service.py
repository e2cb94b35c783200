from typing import Any
from uuid import UUID

import bcrypt
import structlog
from pymongo.asynchronous.database import AsyncDatabase

from medvault.core.core import Service
from medvault.core.modules.user.models import User
from medvault.core.modules.user.validators import normalize_email, validate_password
from medvault.errors import NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


class UserService(Service):
    """Manages local accounts used to authenticate vault owners."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def on_start(self) -> None:
        """Create indexes and the bootstrap account."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self.ensure_bootstrap_user_exists()

    async def get_user(self, user_id: UUID) -> User:
        """Get user by ID."""
        doc = await self._collection.find_one({"_id": user_id})
        if doc is None:
            raise NotFoundError(f"User '{user_id}' not found")
        return User.model_validate(doc)

    async def find_user_by_email(self, email: str) -> User | None:
        doc = await self._collection.find_one({"email": email.strip().lower()})
        if doc is None:
            return None
        return User.model_validate(doc)

    async def create_user(self, email: str, password: str) -> User:
        """Create user with hashed password."""
        email = normalize_email(email)
        if await self.find_user_by_email(email) is not None:
            raise ValidationError(f"User '{email}' already exists")

        validate_password(password)
        password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
        user = User(email=email, password_hash=password_hash)
        await self._collection.insert_one(user.to_mongo())
        logger.info("user_created", user_id=user.id)
        return user

    async def verify_password(self, email: str, password: str) -> User | None:
        """Return the user when the password matches its stored hash."""
        user = await self.find_user_by_email(email)
        if user is None:
            return None
        if not bcrypt.checkpw(password.encode("utf-8"), user.password_hash.encode("utf-8")):
            return None
        return user

    async def ensure_bootstrap_user_exists(self) -> None:
        """Create the configured first account if it does not exist yet."""
        email = self.core.config.bootstrap_email
        password = self.core.config.bootstrap_password
        if not email or not password:
            return
        if await self.find_user_by_email(email) is None:
            await self.create_user(email, password)
