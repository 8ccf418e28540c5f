"""
N8nConnector — Async-only n8n REST API integration block.

Wraps the n8n public API (``/api/v1``) as a connector. Provides workflow
listing, workflow execution, and execution status lookups. All calls are async.

Every response is expected to nest its payload under a ``data`` field.

Usage:
    async with N8nConnector(settings) as n8n:
        workflows = await n8n.client.list_workflows()
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from cortex_orchestrator.config import OrchestratorSettings
from cortex_orchestrator.connectors.base_connector import BaseConnector
from cortex_orchestrator.errors import (
    NetworkFailureError,
    WorkflowEngineAuthError,
    WorkflowEngineUnavailableError,
)
from cortex_orchestrator.models import Workflow

logger = structlog.get_logger(__name__)

API_KEY_HEADER = "X-N8N-API-KEY"


# ── Async n8n Client ─────────────────────────────────────────────────


class AsyncN8nClient:
    """
    Async n8n API client.

    Features:
    - httpx.AsyncClient with HTTP/2 and connection pooling
    - Bounded per-request timeout
    - Optional retry with exponential backoff on connection failures
    - Structured logging for every API call
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout: float = 30.0,
        max_attempts: int = 1,
    ):
        self._base_url = base_url
        self._max_attempts = max_attempts
        headers = {"Accept": "application/json"}
        if api_key:
            headers[API_KEY_HEADER] = api_key
        self._client = httpx.AsyncClient(
            base_url=base_url,
            http2=True,
            headers=headers,
            timeout=httpx.Timeout(timeout, connect=min(timeout, 10.0)),
            limits=httpx.Limits(
                max_connections=20,
                max_keepalive_connections=10,
                keepalive_expiry=30.0,
            ),
        )

    @classmethod
    def from_settings(cls, settings: OrchestratorSettings) -> AsyncN8nClient:
        return cls(
            settings.api_base_url,
            settings.n8n_api_key,
            timeout=settings.n8n_timeout_seconds,
            max_attempts=settings.n8n_max_attempts,
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        """Execute a request, retrying only when the engine is unreachable."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
            retry=retry_if_exception_type(WorkflowEngineUnavailableError),
            reraise=True,
        ):
            with attempt:
                return await self._send(method, path, **kwargs)

    async def _send(self, method: str, path: str, **kwargs) -> Any:
        start = time.monotonic()
        try:
            resp = await self._client.request(method, path, **kwargs)
        except httpx.ConnectError as e:
            raise WorkflowEngineUnavailableError(f"Connection to n8n failed: {e}") from e
        except httpx.TimeoutException as e:
            raise WorkflowEngineUnavailableError(f"Request to n8n timed out: {e}") from e
        except httpx.HTTPError as e:
            raise NetworkFailureError(f"Request to n8n failed: {e}") from e

        latency_ms = (time.monotonic() - start) * 1000

        if resp.status_code in (401, 403):
            raise WorkflowEngineAuthError(
                "n8n rejected the request — check N8N_API_KEY",
                status_code=resp.status_code,
            )
        if resp.status_code >= 400:
            raise NetworkFailureError(
                f"n8n API error: {resp.status_code} — {resp.text}",
                status_code=resp.status_code,
            )

        logger.debug(
            "n8n_request",
            method=method,
            path=path,
            status=resp.status_code,
            latency_ms=round(latency_ms),
        )

        try:
            return resp.json()
        except ValueError as e:
            raise NetworkFailureError(
                f"n8n returned a non-JSON body for {method} {path}",
                status_code=resp.status_code,
            ) from e

    @staticmethod
    def _unwrap(payload: Any, path: str) -> Any:
        if not isinstance(payload, dict) or "data" not in payload:
            raise NetworkFailureError(f"Unexpected response envelope from n8n for {path}")
        return payload["data"]

    async def list_workflows(self) -> list[Workflow]:
        """
        Fetch every workflow, following ``nextCursor`` pagination.
        """
        workflows: list[Workflow] = []
        cursor: str | None = None

        while True:
            params = {"cursor": cursor} if cursor else {}
            payload = await self._request("GET", "/workflows", params=params)
            page = self._unwrap(payload, "/workflows")
            workflows.extend(Workflow.model_validate(item) for item in page)

            cursor = payload.get("nextCursor")
            if not cursor:
                break

        logger.info("n8n_workflows_fetched", count=len(workflows))
        return workflows

    async def execute_workflow(
        self, workflow_id: str, parameters: dict[str, Any]
    ) -> dict[str, Any]:
        """
        Start an execution of ``workflow_id`` with ``parameters`` as the body.

        Returns the engine's execution record (contains ``executionId``).
        """
        path = f"/workflows/{workflow_id}/execute"
        logger.info("n8n_executing_workflow", workflow_id=workflow_id)
        payload = await self._request("POST", path, json=parameters)
        return self._unwrap(payload, path)

    async def get_execution(self, execution_id: str) -> dict[str, Any]:
        """Fetch the current record of an execution."""
        path = f"/executions/{execution_id}"
        payload = await self._request("GET", path)
        return self._unwrap(payload, path)

    async def ping(self) -> None:
        """Cheapest authenticated call available: list a single workflow."""
        await self._send("GET", "/workflows", params={"limit": 1})

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()


# ── Connector ────────────────────────────────────────────────────────


class N8nConnector(BaseConnector):
    """
    n8n integration block: lists, executes and polls workflows.

    Provides an async-only client via `self.client`.
    """

    @property
    def name(self) -> str:
        return "n8n"

    @property
    def description(self) -> str:
        return "List, execute, and monitor n8n workflows"

    def __init__(self, settings: OrchestratorSettings):
        self._settings = settings
        self._client: AsyncN8nClient | None = None

    @property
    def client(self) -> AsyncN8nClient:
        """Get the async n8n client. Lazy-initializes on first access."""
        if self._client is None:
            self._client = AsyncN8nClient.from_settings(self._settings)
            logger.info(
                "n8n_client_created",
                base_url=self._settings.api_base_url,
                authenticated=bool(self._settings.n8n_api_key),
            )
        return self._client

    async def setup(self) -> None:
        """Pre-initialize the client."""
        _ = self.client

    async def teardown(self) -> None:
        """Close the connection pool."""
        if self._client:
            await self._client.close()
            self._client = None

    async def health_check(self) -> bool:
        """Check n8n connectivity and API key validity."""
        try:
            await self.client.ping()
            return True
        except NetworkFailureError as e:
            logger.warning("n8n_health_check_failed", **e.to_dict())
            return False
