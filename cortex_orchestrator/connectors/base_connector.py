"""
BaseConnector — Abstract base class for external service integrations.

Usage:
    class MyConnector(BaseConnector):
        name = "my_service"
        description = "Connects to My Service API"

        async def setup(self) -> None:
            self._client = MyServiceClient()

        async def health_check(self) -> bool:
            return await self._client.ping()

    async with MyConnector() as connector:
        ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

logger = structlog.get_logger(__name__)


class BaseConnector(ABC):
    """
    Abstract base class for integration connectors.

    Subclasses MUST define:
      - name: str — Unique identifier (e.g. "n8n")
      - description: str — What this connector does

    Subclasses MAY override:
      - setup(): One-time initialization (client creation)
      - teardown(): Cleanup (close connections)
      - health_check(): Verify the connection is alive
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique connector identifier."""
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this connector does."""
        ...

    # ── Lifecycle Hooks ──────────────────────────────────────────────

    async def setup(self) -> None:
        """Called once before first use. Override for initialization."""
        pass

    async def teardown(self) -> None:
        """Called on shutdown. Override for cleanup."""
        pass

    async def health_check(self) -> bool:
        """Check if the connector is healthy and ready to use."""
        return True

    async def __aenter__(self) -> BaseConnector:
        await self.setup()
        logger.debug("connector_setup", name=self.name)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.teardown()
        logger.debug("connector_teardown", name=self.name)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
