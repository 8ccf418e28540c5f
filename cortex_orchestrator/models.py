"""
Orchestrator Models — Shared Pydantic models for the protocol and n8n layers.

Defines the core data structures used across the server:
  - Pipeline: Fixed set of routable pipeline tags
  - Workflow: A workflow as reported by n8n
  - PipelineTask: Tagged task payload accepted by dispatch_to_pipeline
  - ExecutionStarted / ExecutionStatus: Tool outputs for executions
  - ToolDescriptor / ResourceDescriptor: Static protocol catalog entries
  - ToolResponse / ReadResourceResponse: Protocol response envelopes

Wire names are camelCase (aliases); Python attributes stay snake_case.
"""

from __future__ import annotations

import enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ── Pipelines ────────────────────────────────────────────────────────


class Pipeline(str, enum.Enum):
    """Abstract routing tags understood by dispatch_to_pipeline."""

    CAD = "cad"
    CODE = "code"
    RESEARCH = "research"
    DATA = "data"


class PipelineTask(BaseModel):
    """Task payload routed to a pipeline. Extra fields are carried through."""

    model_config = ConfigDict(extra="allow")

    type: str
    data: dict[str, Any]


# ── Workflows & Executions ───────────────────────────────────────────


class Workflow(BaseModel):
    """An n8n workflow. Unknown fields reported by n8n are preserved."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    active: bool = False
    tags: list[str] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Older n8n releases use numeric IDs
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        # n8n reports tags as {"id": ..., "name": ...} objects
        if value is None:
            return None
        return [tag.get("name", "") if isinstance(tag, dict) else tag for tag in value]

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match against the name or any tag."""
        needle = needle.lower()
        if needle in self.name.lower():
            return True
        return any(needle in tag.lower() for tag in self.tags or [])

    def to_wire(self) -> dict[str, Any]:
        """Serialise as reported by n8n, omitting ``tags`` only when absent."""
        exclude = {"tags"} if self.tags is None else None
        return self.model_dump(mode="json", exclude=exclude)


class ExecutionState(str, enum.Enum):
    SUCCESS = "success"
    ERROR = "error"
    RUNNING = "running"
    STARTED = "started"
    COMPLETED = "completed"


class ExecutionStarted(BaseModel):
    """Output of execute_workflow and dispatch_to_pipeline."""

    model_config = ConfigDict(populate_by_name=True)

    execution_id: str = Field(alias="executionId", min_length=1)
    status: ExecutionState = ExecutionState.STARTED
    message: str


class ExecutionStatus(BaseModel):
    """Output of get_workflow_status."""

    model_config = ConfigDict(populate_by_name=True)

    execution_id: str = Field(alias="executionId")
    status: ExecutionState
    started_at: str | None = Field(default=None, alias="startedAt")
    stopped_at: str | None = Field(default=None, alias="stoppedAt")
    data: Any = None


# ── Protocol Catalog ─────────────────────────────────────────────────


class ToolDescriptor(BaseModel):
    """Static description of a callable tool."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str
    input_schema: dict[str, Any] = Field(alias="inputSchema")


class ResourceDescriptor(BaseModel):
    """Static description of a readable resource."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    uri: str
    name: str
    description: str
    mime_type: str = Field(default="application/json", alias="mimeType")


# ── Protocol Responses ───────────────────────────────────────────────


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResponse(BaseModel):
    """Envelope returned by CallTool."""

    model_config = ConfigDict(populate_by_name=True)

    content: list[TextContent]
    is_error: bool | None = Field(default=None, alias="isError")

    @classmethod
    def text(cls, text: str) -> ToolResponse:
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, message: str) -> ToolResponse:
        return cls(content=[TextContent(text=f"Error: {message}")], is_error=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ResourceContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uri: str
    mime_type: str = Field(alias="mimeType")
    text: str


class ReadResourceResponse(BaseModel):
    """Envelope returned by ReadResource."""

    contents: list[ResourceContent]

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
