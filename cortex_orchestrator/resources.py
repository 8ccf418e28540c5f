"""
ResourceRegistry — URI-addressed documents readable by calling agents.

  - cortex://workflows: live workflow listing fetched from n8n
  - cortex://pipelines: static, descriptive catalog of the four pipelines

The pipeline catalog is illustrative only; it does not reflect the
workflow IDs the PipelineRouter actually resolves.
"""

from __future__ import annotations

import json
from typing import Awaitable, Callable

import structlog

from cortex_orchestrator.connectors.n8n_connector import AsyncN8nClient
from cortex_orchestrator.errors import DuplicateRegistrationError, UnknownResourceError
from cortex_orchestrator.models import (
    ReadResourceResponse,
    ResourceContent,
    ResourceDescriptor,
)

logger = structlog.get_logger(__name__)

WORKFLOWS_URI = "cortex://workflows"
PIPELINES_URI = "cortex://pipelines"

ResourceReader = Callable[[], Awaitable[str]]

PIPELINE_CATALOG: dict[str, dict] = {
    "cad": {
        "name": "CAD Pipeline",
        "status": "active",
        "workflows": ["cad-import", "cad-process", "cad-export"],
    },
    "code": {
        "name": "Code Pipeline",
        "status": "active",
        "workflows": ["code-analyze", "code-generate", "code-deploy"],
    },
    "research": {
        "name": "Research Pipeline",
        "status": "active",
        "workflows": ["research-gather", "research-analyze", "research-report"],
    },
    "data": {
        "name": "Data Pipeline",
        "status": "active",
        "workflows": ["data-ingest", "data-transform", "data-store"],
    },
}


class ResourceRegistry:
    """Registry of readable resources keyed by unique URI."""

    def __init__(self) -> None:
        self._readers: dict[str, ResourceReader] = {}
        self._descriptors: dict[str, ResourceDescriptor] = {}

    def register(self, descriptor: ResourceDescriptor, reader: ResourceReader) -> None:
        """Register a reader under ``descriptor.uri``. Duplicate URIs raise."""
        if descriptor.uri in self._readers:
            raise DuplicateRegistrationError(
                f"Resource '{descriptor.uri}' is already registered.",
                key=descriptor.uri,
            )
        self._readers[descriptor.uri] = reader
        self._descriptors[descriptor.uri] = descriptor
        logger.debug("resource_registered", uri=descriptor.uri)

    def list_all(self) -> list[ResourceDescriptor]:
        return list(self._descriptors.values())

    async def read(self, uri: str) -> ReadResourceResponse:
        """
        Read a resource by URI.

        Raises:
            UnknownResourceError: If no resource is registered for ``uri``.
        """
        if uri not in self._readers:
            raise UnknownResourceError(f"Unknown resource: {uri}", uri=uri)

        text = await self._readers[uri]()
        descriptor = self._descriptors[uri]
        return ReadResourceResponse(
            contents=[ResourceContent(uri=uri, mime_type=descriptor.mime_type, text=text)]
        )

    def __contains__(self, uri: str) -> bool:
        return uri in self._readers

    def __len__(self) -> int:
        return len(self._readers)


def build_resource_registry(client: AsyncN8nClient) -> ResourceRegistry:
    """Create the registry holding the workflow listing and pipeline catalog."""

    async def read_workflows() -> str:
        workflows = await client.list_workflows()
        return json.dumps([workflow.to_wire() for workflow in workflows], indent=2)

    async def read_pipelines() -> str:
        return json.dumps(PIPELINE_CATALOG, indent=2)

    registry = ResourceRegistry()
    registry.register(
        ResourceDescriptor(
            uri=WORKFLOWS_URI,
            name="CORTEX Workflows",
            description="List of all available workflows",
            mime_type="application/json",
        ),
        read_workflows,
    )
    registry.register(
        ResourceDescriptor(
            uri=PIPELINES_URI,
            name="CORTEX Pipelines",
            description="Available processing pipelines",
            mime_type="application/json",
        ),
        read_pipelines,
    )
    return registry
