"""
ProtocolServer — Bridges MCP requests to the tool and resource registries.

Exposes four capabilities:
  - list_tools / call_tool
  - list_resources / read_resource

``call_tool`` is the single chokepoint for failure translation: every
exception raised while dispatching a tool becomes an ``isError`` response.
``read_resource`` does not translate failures; they reach the transport
as protocol errors.
"""

from __future__ import annotations

from typing import Any

import mcp.types as types
import structlog
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from cortex_orchestrator.config import OrchestratorSettings
from cortex_orchestrator.connectors.n8n_connector import AsyncN8nClient, N8nConnector
from cortex_orchestrator.errors import OrchestratorError
from cortex_orchestrator.models import (
    ReadResourceResponse,
    ResourceDescriptor,
    ToolDescriptor,
    ToolResponse,
)
from cortex_orchestrator.resources import ResourceRegistry, build_resource_registry
from cortex_orchestrator.router import PipelineRouter
from cortex_orchestrator.tools import ToolRegistry, build_tool_registry
from cortex_orchestrator.version import SERVER_NAME, VERSION

logger = structlog.get_logger(__name__)


class ProtocolServer:
    """
    Transport-agnostic request handlers.

    Usage:
        server = ProtocolServer.from_client(settings, client)
        response = await server.call_tool("list_workflows", {"filter": "cad"})
    """

    def __init__(
        self,
        tools: ToolRegistry,
        resources: ResourceRegistry,
        *,
        name: str = SERVER_NAME,
        version: str = VERSION,
    ):
        self._tools = tools
        self._resources = resources
        self.name = name
        self.version = version

    @classmethod
    def from_client(
        cls, settings: OrchestratorSettings, client: AsyncN8nClient
    ) -> ProtocolServer:
        router = PipelineRouter(settings)
        return cls(build_tool_registry(client, router), build_resource_registry(client))

    # ── Tools ────────────────────────────────────────────────────────

    def list_tools(self) -> list[ToolDescriptor]:
        return self._tools.list_all()

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> ToolResponse:
        """Dispatch a tool call. Never raises; failures become isError responses."""
        logger.info("tool_called", tool=name)
        try:
            return await self._tools.dispatch(name, arguments)
        except OrchestratorError as e:
            logger.warning("tool_failed", tool=name, **e.to_dict())
            return ToolResponse.error(str(e))
        except Exception as e:
            logger.exception("tool_crashed", tool=name, error=str(e))
            return ToolResponse.error(str(e) or e.__class__.__name__)

    # ── Resources ────────────────────────────────────────────────────

    def list_resources(self) -> list[ResourceDescriptor]:
        return self._resources.list_all()

    async def read_resource(self, uri: str) -> ReadResourceResponse:
        logger.info("resource_read", uri=uri)
        return await self._resources.read(uri)

    # ── MCP wiring ───────────────────────────────────────────────────

    def build_mcp_server(self) -> Server:
        """Register the handlers on an MCP low-level server."""
        server = Server(self.name, version=self.version)

        @server.list_tools()
        async def _list_tools() -> list[types.Tool]:
            return [
                types.Tool(
                    name=d.name,
                    description=d.description,
                    inputSchema=d.input_schema,
                )
                for d in self.list_tools()
            ]

        # Arguments are validated by the tool handlers, not by the MCP layer
        @server.call_tool(validate_input=False)
        async def _call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
            response = await self.call_tool(name, arguments)
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=c.text) for c in response.content],
                isError=bool(response.is_error),
            )

        @server.list_resources()
        async def _list_resources() -> list[types.Resource]:
            return [
                types.Resource(
                    uri=d.uri,
                    name=d.name,
                    description=d.description,
                    mimeType=d.mime_type,
                )
                for d in self.list_resources()
            ]

        @server.read_resource()
        async def _read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
            # AnyUrl may serialise an empty path as "/"
            response = await self.read_resource(str(uri).rstrip("/"))
            return [
                ReadResourceContents(content=c.text, mime_type=c.mime_type)
                for c in response.contents
            ]

        return server


async def serve_stdio(settings: OrchestratorSettings) -> None:
    """Serve the orchestrator over stdio until the client disconnects."""
    async with N8nConnector(settings) as connector:
        protocol = ProtocolServer.from_client(settings, connector.client)
        server = protocol.build_mcp_server()

        async with stdio_server() as (read_stream, write_stream):
            logger.info(
                "server_started",
                name=protocol.name,
                version=protocol.version,
                n8n=settings.api_base_url,
                pipelines=PipelineRouter(settings).workflow_ids,
                machine_id=settings.machine_id,
            )
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )

    logger.info("server_stopped", name=protocol.name)
