"""
Structured Error Taxonomy — Typed exceptions for the CORTEX orchestrator.

Design principles:
  - Every error carries `retryable` + `error_code` for automated decisions
  - Hierarchy mirrors the server layers: Protocol → Pipeline → Workflow engine
  - Structured logging friendly: all errors serialize cleanly to JSON
"""

from __future__ import annotations

__all__ = [
    # Base
    "OrchestratorError",
    # Protocol layer
    "UnknownToolError",
    "UnknownResourceError",
    "MalformedArgumentError",
    "DuplicateRegistrationError",
    # Pipeline layer
    "UnknownPipelineError",
    # Workflow engine layer
    "NetworkFailureError",
    "WorkflowEngineUnavailableError",
    "WorkflowEngineAuthError",
]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Base
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class OrchestratorError(Exception):
    """Root exception for the orchestrator.

    Attributes:
        retryable: If True, the caller should consider retrying the operation.
        error_code: Machine-readable code for dashboards and alerting.
    """

    retryable: bool = False
    error_code: str = "ORCHESTRATOR_ERROR"

    def __init__(self, message: str, *, detail: str | None = None):
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict:
        """Serialize for structured logging."""
        return {
            "error_code": self.error_code,
            "message": str(self),
            "detail": self.detail,
            "retryable": self.retryable,
        }


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Protocol Layer — Errors raised while dispatching tools and resources
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class UnknownToolError(OrchestratorError):
    """No tool is registered under the requested name."""

    error_code = "UNKNOWN_TOOL"

    def __init__(self, message: str, *, tool_name: str = "", **kwargs):
        self.tool_name = tool_name
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["tool_name"] = self.tool_name
        return d


class UnknownResourceError(OrchestratorError):
    """No resource is registered under the requested URI."""

    error_code = "UNKNOWN_RESOURCE"

    def __init__(self, message: str, *, uri: str = "", **kwargs):
        self.uri = uri
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["uri"] = self.uri
        return d


class MalformedArgumentError(OrchestratorError):
    """A tool argument is missing or has the wrong shape."""

    error_code = "MALFORMED_ARGUMENT"

    def __init__(self, message: str, *, field: str = "", **kwargs):
        self.field = field
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["field"] = self.field
        return d


class DuplicateRegistrationError(OrchestratorError):
    """A tool name or resource URI was registered twice."""

    error_code = "DUPLICATE_REGISTRATION"

    def __init__(self, message: str, *, key: str = "", **kwargs):
        self.key = key
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["key"] = self.key
        return d


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Pipeline Layer
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class UnknownPipelineError(OrchestratorError):
    """Pipeline tag is outside the fixed set of known pipelines."""

    error_code = "UNKNOWN_PIPELINE"

    def __init__(self, message: str, *, pipeline: str = "", **kwargs):
        self.pipeline = pipeline
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["pipeline"] = self.pipeline
        return d


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Workflow Engine Layer — Errors from the n8n REST API
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class NetworkFailureError(OrchestratorError):
    """Any failed call to the workflow engine (non-2xx, bad envelope, transport)."""

    error_code = "NETWORK_FAILURE"

    def __init__(self, message: str, *, status_code: int | None = None, **kwargs):
        self.status_code = status_code
        super().__init__(message, **kwargs)

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["status_code"] = self.status_code
        return d


class WorkflowEngineUnavailableError(NetworkFailureError):
    """Engine is unreachable or the request timed out."""

    retryable = True
    error_code = "WORKFLOW_ENGINE_UNAVAILABLE"


class WorkflowEngineAuthError(NetworkFailureError):
    """Engine rejected the API key."""

    error_code = "WORKFLOW_ENGINE_AUTH"
