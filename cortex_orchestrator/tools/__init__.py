"""
Tools — Callable operations exposed over the protocol.

Key concepts:
  - ``ToolRegistry``: name → handler store with JSON rendering.
  - ``WorkflowTools``: handlers for the n8n workflow tools.
  - ``build_tool_registry()``: wires the handlers into a registry.
"""

from cortex_orchestrator.tools.registry import ToolHandler, ToolRegistry
from cortex_orchestrator.tools.workflow_tools import WorkflowTools, build_tool_registry

__all__ = [
    "ToolHandler",
    "ToolRegistry",
    "WorkflowTools",
    "build_tool_registry",
]
