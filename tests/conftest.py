from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from cortex_orchestrator.config import OrchestratorSettings
from cortex_orchestrator.connectors.n8n_connector import AsyncN8nClient
from cortex_orchestrator.models import Workflow
from cortex_orchestrator.resources import build_resource_registry
from cortex_orchestrator.router import PipelineRouter
from cortex_orchestrator.server import ProtocolServer
from cortex_orchestrator.tools import build_tool_registry

FIXED_NOW = datetime(2026, 10, 19, 12, 30, 45, 123456, tzinfo=timezone.utc)

_ENV_VARS = (
    "N8N_HOST",
    "N8N_API_KEY",
    "N8N_TIMEOUT_SECONDS",
    "N8N_MAX_ATTEMPTS",
    "CAD_PIPELINE_ID",
    "CODE_PIPELINE_ID",
    "RESEARCH_PIPELINE_ID",
    "DATA_PIPELINE_ID",
    "MACHINE_ID",
    "LOG_LEVEL",
    "LOG_JSON",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the host environment from leaking into settings."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_settings():
    def _make(**overrides) -> OrchestratorSettings:
        return OrchestratorSettings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()


@pytest.fixture
def workflows():
    return [
        Workflow(id="1", name="CAD Import", active=True, tags=["cad", "ingest"]),
        Workflow(id="2", name="Deploy Service", active=False, tags=["Code"]),
        Workflow(id="3", name="Weekly Report", active=True),
    ]


@pytest.fixture
def n8n_client(workflows):
    """AsyncN8nClient double; no network."""
    client = AsyncMock(spec=AsyncN8nClient)
    client.list_workflows.return_value = workflows
    client.execute_workflow.return_value = {"executionId": "exec-1"}
    client.get_execution.return_value = {
        "id": "exec-1",
        "finished": False,
        "startedAt": "2026-10-19T12:00:00.000Z",
        "stoppedAt": None,
        "data": None,
    }
    return client


@pytest.fixture
def make_server(n8n_client, make_settings):
    """Build a ProtocolServer over the mocked client with a fixed clock."""

    def _make(**settings_overrides) -> ProtocolServer:
        settings = make_settings(**settings_overrides)
        router = PipelineRouter(settings, clock=lambda: FIXED_NOW)
        return ProtocolServer(
            build_tool_registry(n8n_client, router),
            build_resource_registry(n8n_client),
        )

    return _make


@pytest.fixture
def server(make_server):
    return make_server()
