"""
Workflow tools — the four tools exposed to calling agents.

  - list_workflows:       list n8n workflows, optionally filtered
  - execute_workflow:     start an execution of a workflow
  - get_workflow_status:  poll an execution
  - dispatch_to_pipeline: route a task to a pipeline's master workflow

Arguments are validated at the boundary; malformed input raises
``MalformedArgumentError`` before any call to n8n is made.
"""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError

from cortex_orchestrator.connectors.n8n_connector import AsyncN8nClient
from cortex_orchestrator.errors import MalformedArgumentError, NetworkFailureError
from cortex_orchestrator.models import (
    ExecutionStarted,
    ExecutionState,
    ExecutionStatus,
    Pipeline,
    PipelineTask,
    ToolDescriptor,
    Workflow,
)
from cortex_orchestrator.router import PipelineRouter
from cortex_orchestrator.tools.registry import ToolRegistry

logger = structlog.get_logger(__name__)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Descriptors
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

LIST_WORKFLOWS = ToolDescriptor(
    name="list_workflows",
    description="List all available n8n workflows",
    input_schema={
        "type": "object",
        "properties": {
            "filter": {
                "type": "string",
                "description": "Optional filter to search workflows",
            }
        },
    },
)

EXECUTE_WORKFLOW = ToolDescriptor(
    name="execute_workflow",
    description="Execute a specific n8n workflow",
    input_schema={
        "type": "object",
        "properties": {
            "workflow_id": {
                "type": "string",
                "description": "ID of the workflow to execute",
            },
            "parameters": {
                "type": "object",
                "description": "Parameters to pass to the workflow",
            },
        },
        "required": ["workflow_id"],
    },
)

GET_WORKFLOW_STATUS = ToolDescriptor(
    name="get_workflow_status",
    description="Get the execution status of a workflow",
    input_schema={
        "type": "object",
        "properties": {
            "execution_id": {
                "type": "string",
                "description": "ID of the execution to check",
            }
        },
        "required": ["execution_id"],
    },
)

DISPATCH_TO_PIPELINE = ToolDescriptor(
    name="dispatch_to_pipeline",
    description="Dispatch a task to a specific CORTEX pipeline",
    input_schema={
        "type": "object",
        "properties": {
            "pipeline": {
                "type": "string",
                "enum": [pipeline.value for pipeline in Pipeline],
                "description": "Target pipeline",
            },
            "task": {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "data": {"type": "object"},
                },
                "required": ["type", "data"],
            },
        },
        "required": ["pipeline", "task"],
    },
)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Argument helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _require_str(arguments: dict[str, Any], field: str) -> str:
    value = arguments.get(field)
    if value is None:
        raise MalformedArgumentError(f"Missing required argument: {field}", field=field)
    if not isinstance(value, str) or not value.strip():
        raise MalformedArgumentError(
            f"Argument '{field}' must be a non-empty string", field=field
        )
    return value


def _optional_object(arguments: dict[str, Any], field: str) -> dict[str, Any]:
    value = arguments.get(field)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedArgumentError(f"Argument '{field}' must be an object", field=field)
    return value


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
#  Handlers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class WorkflowTools:
    """Tool handlers backed by an n8n client and a pipeline router."""

    def __init__(self, client: AsyncN8nClient, router: PipelineRouter):
        self._client = client
        self._router = router

    async def list_workflows(self, arguments: dict[str, Any]) -> list[Workflow]:
        needle = arguments.get("filter")
        if needle is not None and not isinstance(needle, str):
            raise MalformedArgumentError("Argument 'filter' must be a string", field="filter")

        workflows = await self._client.list_workflows()
        if not needle:
            return workflows
        return [workflow for workflow in workflows if workflow.matches(needle)]

    async def execute_workflow(self, arguments: dict[str, Any]) -> ExecutionStarted:
        workflow_id = _require_str(arguments, "workflow_id")
        parameters = _optional_object(arguments, "parameters")
        return await self._start(workflow_id, parameters)

    async def get_workflow_status(self, arguments: dict[str, Any]) -> ExecutionStatus:
        execution_id = _require_str(arguments, "execution_id")
        record = await self._client.get_execution(execution_id)
        if not isinstance(record, dict):
            raise NetworkFailureError(f"Unexpected execution record for {execution_id}")

        finished = bool(record.get("finished"))
        return ExecutionStatus(
            execution_id=execution_id,
            status=ExecutionState.COMPLETED if finished else ExecutionState.RUNNING,
            started_at=record.get("startedAt"),
            stopped_at=record.get("stoppedAt"),
            data=record.get("data"),
        )

    async def dispatch_to_pipeline(self, arguments: dict[str, Any]) -> ExecutionStarted:
        pipeline = arguments.get("pipeline")
        # Unknown pipelines are reported before task validation
        self._router.resolve(pipeline)

        raw_task = arguments.get("task")
        if raw_task is None:
            raise MalformedArgumentError("Missing required argument: task", field="task")
        try:
            task = PipelineTask.model_validate(raw_task)
        except ValidationError as e:
            raise MalformedArgumentError(
                f"Argument 'task' is malformed: {e.error_count()} validation error(s)",
                field="task",
                detail=str(e),
            ) from e

        dispatch = self._router.route(pipeline, task)
        return await self._start(dispatch.workflow_id, dispatch.parameters)

    async def _start(self, workflow_id: str, parameters: dict[str, Any]) -> ExecutionStarted:
        record = await self._client.execute_workflow(workflow_id, parameters)
        execution_id = record.get("executionId") if isinstance(record, dict) else None
        if isinstance(execution_id, int) and not isinstance(execution_id, bool):
            execution_id = str(execution_id)
        if not isinstance(execution_id, str) or not execution_id:
            raise NetworkFailureError(
                f"n8n did not report an executionId for workflow {workflow_id}"
            )

        logger.info("workflow_execution_started", workflow_id=workflow_id, execution_id=execution_id)
        return ExecutionStarted(
            execution_id=execution_id,
            message=f"Workflow {workflow_id} execution started",
        )


def build_tool_registry(client: AsyncN8nClient, router: PipelineRouter) -> ToolRegistry:
    """Create the registry holding the four workflow tools."""
    tools = WorkflowTools(client, router)
    registry = ToolRegistry()
    registry.register(LIST_WORKFLOWS, tools.list_workflows)
    registry.register(EXECUTE_WORKFLOW, tools.execute_workflow)
    registry.register(GET_WORKFLOW_STATUS, tools.get_workflow_status)
    registry.register(DISPATCH_TO_PIPELINE, tools.dispatch_to_pipeline)
    return registry
