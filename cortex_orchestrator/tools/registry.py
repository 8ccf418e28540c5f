"""
ToolRegistry — Catalog and dispatcher for the server's callable tools.

Every tool is an async handler taking the raw argument object plus a
static ``ToolDescriptor`` (name, description, JSON input schema). The
registry renders whatever the handler returns into a ``ToolResponse``
carrying pretty-printed JSON text.

Usage::

    registry = ToolRegistry()
    registry.register(descriptor, handler)
    response = await registry.dispatch("list_workflows", {"filter": "cad"})
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable

import structlog
from pydantic import BaseModel

from cortex_orchestrator.errors import DuplicateRegistrationError, UnknownToolError
from cortex_orchestrator.models import ToolDescriptor, ToolResponse, Workflow

logger = structlog.get_logger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class ToolRegistry:
    """
    Registry of tools keyed by unique name, in registration order.

    Thread-safety: safe for single-process asyncio.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, ToolHandler] = {}
        self._descriptors: dict[str, ToolDescriptor] = {}

    # ── Registration ─────────────────────────────────────────────────

    def register(self, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        """
        Register a handler under ``descriptor.name``.

        Raises:
            DuplicateRegistrationError: If the name is already taken.
        """
        if descriptor.name in self._handlers:
            raise DuplicateRegistrationError(
                f"Tool '{descriptor.name}' is already registered.",
                key=descriptor.name,
            )

        self._handlers[descriptor.name] = handler
        self._descriptors[descriptor.name] = descriptor

        logger.debug(
            "tool_registered",
            name=descriptor.name,
            params=list(descriptor.input_schema.get("properties", {})),
        )

    # ── Lookup ───────────────────────────────────────────────────────

    def get(self, name: str) -> ToolHandler:
        """
        Get a tool handler by name.

        Raises:
            UnknownToolError: If tool not found.
        """
        if name not in self._handlers:
            raise UnknownToolError(f"Unknown tool: {name}", tool_name=str(name))
        return self._handlers[name]

    def list_all(self) -> list[ToolDescriptor]:
        """List all registered tool descriptors."""
        return list(self._descriptors.values())

    # ── Dispatch ─────────────────────────────────────────────────────

    async def dispatch(self, name: str, arguments: dict[str, Any] | None) -> ToolResponse:
        """Run the named tool and render its result as JSON text."""
        handler = self.get(name)
        result = await handler(arguments or {})
        return ToolResponse.text(_render(result))

    @property
    def names(self) -> list[str]:
        """List of registered tool names."""
        return list(self._handlers.keys())

    def __len__(self) -> int:
        return len(self._handlers)

    def __contains__(self, name: str) -> bool:
        return name in self._handlers

    def __repr__(self) -> str:
        return f"<ToolRegistry tools={len(self._handlers)}>"


def _render(result: Any) -> str:
    """Pretty-print a handler result (models by wire alias, workflows as reported) as JSON."""
    if isinstance(result, BaseModel):
        result = result.model_dump(mode="json", by_alias=True)
    elif isinstance(result, list):
        result = [
            item.to_wire() if isinstance(item, Workflow) else item for item in result
        ]
    return json.dumps(result, indent=2, ensure_ascii=False)
