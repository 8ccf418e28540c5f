"""
CORTEX Orchestrator — MCP adapter for n8n workflow automation.

Exposes tools and resources over the Model Context Protocol and fulfils
them against the n8n REST API, including routing of abstract pipeline
tasks to concrete workflows.
"""

from cortex_orchestrator.config import OrchestratorSettings, get_settings
from cortex_orchestrator.connectors import AsyncN8nClient, N8nConnector
from cortex_orchestrator.resources import ResourceRegistry, build_resource_registry
from cortex_orchestrator.router import PipelineDispatch, PipelineRouter
from cortex_orchestrator.server import ProtocolServer, serve_stdio
from cortex_orchestrator.tools import ToolRegistry, build_tool_registry
from cortex_orchestrator.version import SERVER_NAME, VERSION

__all__ = [
    # Configuration
    "OrchestratorSettings",
    "get_settings",
    # n8n
    "AsyncN8nClient",
    "N8nConnector",
    # Routing
    "PipelineRouter",
    "PipelineDispatch",
    # Registries
    "ToolRegistry",
    "build_tool_registry",
    "ResourceRegistry",
    "build_resource_registry",
    # Protocol
    "ProtocolServer",
    "serve_stdio",
    "SERVER_NAME",
    "VERSION",
]
