from __future__ import annotations

import importlib
from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import TYPE_CHECKING, Any, cast
from urllib.parse import urlparse

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from medvault.config import Config
from medvault.core.modules.otp.notifier import EmailNotifier, create_email_notifier
from medvault.utils import now

if TYPE_CHECKING:
    from medvault.core.modules.access.service import AccessService
    from medvault.core.modules.document.service import DocumentService
    from medvault.core.modules.otp.service import OtpService
    from medvault.core.modules.session.service import SessionService
    from medvault.core.modules.sweeper.service import SweeperService
    from medvault.core.modules.user.service import UserService
    from medvault.core.modules.vault_session.service import VaultSessionService


class Service:
    """Base class for services with direct database access."""

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        self.database = database
        self._core: Core | None = None

    async def on_start(self) -> None:
        """Initialize service on application startup."""

    async def on_stop(self) -> None:
        """Cleanup service on application shutdown."""

    @property
    def core(self) -> Core:
        """Get the core application context."""
        if self._core is None:
            raise RuntimeError("Core not set for service")
        return self._core

    def set_core(self, core: Core) -> None:
        """Set the core application context."""
        self._core = core


class Services:
    """Service registry that automatically discovers and initializes services."""

    user: UserService
    session: SessionService
    vault_session: VaultSessionService
    access: AccessService
    otp: OtpService
    document: DocumentService
    sweeper: SweeperService

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        """Initialize all services automatically using service configuration."""
        self._services: list[Service] = []
        self._database = database

        # Service configuration: (attribute_name, module_path, class_name)
        # Order matters: the sweeper starts last, once session indexes exist
        service_configs = [
            ("user", "medvault.core.modules.user.service", "UserService"),
            ("session", "medvault.core.modules.session.service", "SessionService"),
            ("vault_session", "medvault.core.modules.vault_session.service", "VaultSessionService"),
            ("access", "medvault.core.modules.access.service", "AccessService"),
            ("otp", "medvault.core.modules.otp.service", "OtpService"),
            ("document", "medvault.core.modules.document.service", "DocumentService"),
            ("sweeper", "medvault.core.modules.sweeper.service", "SweeperService"),
        ]

        for attr_name, module_path, class_name in service_configs:
            module = importlib.import_module(module_path)
            service_class = cast(type[Service], getattr(module, class_name))
            service_instance = service_class(database)
            setattr(self, attr_name, service_instance)
            self._services.append(service_instance)

    def set_core(self, core: Core) -> None:
        """Set core reference for all services."""
        for service in self._services:
            service.set_core(core)

    async def start_all(self) -> None:
        """Start all services that have startup logic."""
        for service in self._services:
            await service.on_start()

    async def stop_all(self) -> None:
        """Stop all services in reverse start order."""
        for service in reversed(self._services):
            await service.on_stop()


class Core:
    """Container providing config, database, email notifier, clock and all service instances."""

    config: Config
    mongo_client: AsyncMongoClient[dict[str, Any]]
    database: AsyncDatabase[dict[str, Any]]
    notifier: EmailNotifier
    services: Services

    def __init__(
        self,
        config: Config,
        mongo_client: AsyncMongoClient[dict[str, Any]] | None = None,
        notifier: EmailNotifier | None = None,
        clock: Callable[[], datetime] = now,
    ) -> None:
        """Initialize core with config, MongoDB, and auto-register services.

        mongo_client, notifier and clock are replaceable for tests.
        """
        self.config = config
        if mongo_client is None:
            mongo_client = AsyncMongoClient(config.database_url, uuidRepresentation="standard", tz_aware=True)
        self.mongo_client = mongo_client
        self.database = self.mongo_client.get_database(urlparse(config.database_url).path[1:])
        self.notifier = notifier if notifier is not None else create_email_notifier(config)
        self._clock = clock
        self.services = Services(self.database)
        self.services.set_core(self)

    def now(self) -> datetime:
        """Current time in UTC, from the configured clock."""
        return self._clock()

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Manage application lifecycle - startup and shutdown."""
        await self.on_start()
        try:
            yield
        finally:
            await self.on_stop()

    async def on_start(self) -> None:
        """Start all services on application startup."""
        await self.services.start_all()

    async def on_stop(self) -> None:
        """Stop services and close MongoDB connection on shutdown."""
        await self.services.stop_all()
        await self.mongo_client.aclose()
