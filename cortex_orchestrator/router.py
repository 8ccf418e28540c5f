"""
PipelineRouter — Routes abstract pipeline tasks to concrete n8n workflows.

The router is the dispatch point that:
  1. Resolves a pipeline tag (cad, code, research, data) to a workflow ID
  2. Tags the task with the configured machine ID, if any
  3. Builds the parameters forwarded to the workflow execution
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from cortex_orchestrator.config import OrchestratorSettings
from cortex_orchestrator.errors import UnknownPipelineError
from cortex_orchestrator.models import Pipeline, PipelineTask

logger = structlog.get_logger(__name__)

DEFAULT_WORKFLOW_SUFFIX = "-master-workflow"


@dataclass(frozen=True)
class PipelineDispatch:
    """A resolved pipeline invocation, ready for execute_workflow."""

    workflow_id: str
    parameters: dict[str, Any]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PipelineRouter:
    """
    Resolves pipeline tags using the immutable settings it was built with.

    Usage:
        router = PipelineRouter(settings)
        dispatch = router.route("cad", PipelineTask(type="mesh", data={}))
        await client.execute_workflow(dispatch.workflow_id, dispatch.parameters)
    """

    def __init__(
        self,
        settings: OrchestratorSettings,
        *,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self._overrides = settings.pipeline_overrides()
        self._machine_id = settings.machine_id or None
        self._clock = clock

    @property
    def workflow_ids(self) -> dict[str, str]:
        """Effective pipeline → workflow ID mapping."""
        return {pipeline.value: self.resolve(pipeline.value) for pipeline in Pipeline}

    def resolve(self, pipeline: str) -> str:
        """
        Map a pipeline tag to its workflow ID. A non-empty override wins.

        Raises UnknownPipelineError for tags outside the fixed set.
        """
        try:
            tag = Pipeline(pipeline).value
        except ValueError:
            raise UnknownPipelineError(
                f"Unknown pipeline: {pipeline}", pipeline=str(pipeline)
            ) from None
        return self._overrides.get(tag) or f"{tag}{DEFAULT_WORKFLOW_SUFFIX}"

    def augment_task(self, task: PipelineTask) -> dict[str, Any]:
        """Shallow-merge ``machineId`` into the task when one is configured."""
        payload = task.model_dump(mode="json")
        if self._machine_id:
            payload = {**payload, "machineId": self._machine_id}
        return payload

    def route(self, pipeline: str, task: PipelineTask) -> PipelineDispatch:
        workflow_id = self.resolve(pipeline)
        parameters = {
            "task": self.augment_task(task),
            "pipeline": pipeline,
            "timestamp": isoformat_utc(self._clock()),
        }

        logger.info(
            "pipeline_resolved",
            pipeline=pipeline,
            workflow_id=workflow_id,
            task_type=task.type,
            machine_id=self._machine_id,
        )
        return PipelineDispatch(workflow_id=workflow_id, parameters=parameters)
