import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock

from cortex_orchestrator.connectors.n8n_connector import AsyncN8nClient, N8nConnector
from cortex_orchestrator.errors import (
    NetworkFailureError,
    WorkflowEngineAuthError,
    WorkflowEngineUnavailableError,
)

BASE_URL = "http://n8n.test/api/v1"


def _response(status_code: int = 200, payload=None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = payload if payload is not None else {}
    resp.text = "boom"
    return resp


@pytest.fixture
def mock_http():
    """Stands in for the inner httpx.AsyncClient."""
    mock_client_instance = AsyncMock(spec=httpx.AsyncClient)
    mock_client_instance.request.return_value = _response(payload={"data": []})
    mock_client_instance.aclose = AsyncMock()
    return mock_client_instance


def _client(mock_http, **kwargs) -> AsyncN8nClient:
    client = AsyncN8nClient(BASE_URL, "dummy_key", **kwargs)
    client._client = mock_http
    return client


def test_api_key_header_only_when_configured():
    with_key = AsyncN8nClient(BASE_URL, "dummy_key")
    without_key = AsyncN8nClient(BASE_URL)

    assert with_key._client.headers["X-N8N-API-KEY"] == "dummy_key"
    assert "X-N8N-API-KEY" not in without_key._client.headers


def test_from_settings_uses_api_root(make_settings):
    settings = make_settings(n8n_host="http://n8n.test:5678/", n8n_timeout_seconds=12.5)
    client = AsyncN8nClient.from_settings(settings)

    assert str(client._client.base_url).rstrip("/") == "http://n8n.test:5678/api/v1"
    assert client._client.timeout.read == settings.n8n_timeout_seconds
    assert client._client.timeout.connect == 10.0


@pytest.mark.asyncio
async def test_list_workflows_parses_envelope(mock_http):
    mock_http.request.return_value = _response(
        payload={
            "data": [
                {"id": "1", "name": "CAD Import", "active": True, "tags": [{"id": "t1", "name": "cad"}]},
                {"id": 2, "name": "Legacy", "active": False},
            ]
        }
    )
    client = _client(mock_http)

    workflows = await client.list_workflows()

    assert [w.id for w in workflows] == ["1", "2"]
    assert workflows[0].tags == ["cad"]
    assert workflows[1].tags is None
    mock_http.request.assert_awaited_once_with("GET", "/workflows", params={})


@pytest.mark.asyncio
async def test_list_workflows_follows_cursor(mock_http):
    first = _response(payload={"data": [{"id": "1", "name": "A"}], "nextCursor": "abc"})
    second = _response(payload={"data": [{"id": "2", "name": "B"}], "nextCursor": None})
    mock_http.request.side_effect = [first, second]
    client = _client(mock_http)

    workflows = await client.list_workflows()

    assert [w.id for w in workflows] == ["1", "2"]
    assert mock_http.request.call_count == 2
    assert mock_http.request.call_args_list[1].kwargs["params"] == {"cursor": "abc"}


@pytest.mark.asyncio
async def test_execute_workflow_posts_parameters(mock_http):
    mock_http.request.return_value = _response(payload={"data": {"executionId": "exec-9"}})
    client = _client(mock_http)

    record = await client.execute_workflow("wf-1", {"x": 1})

    assert record == {"executionId": "exec-9"}
    mock_http.request.assert_awaited_once_with(
        "POST", "/workflows/wf-1/execute", json={"x": 1}
    )


@pytest.mark.asyncio
async def test_get_execution(mock_http):
    mock_http.request.return_value = _response(payload={"data": {"finished": True}})
    client = _client(mock_http)

    record = await client.get_execution("exec-9")

    assert record == {"finished": True}
    mock_http.request.assert_awaited_once_with("GET", "/executions/exec-9")


@pytest.mark.asyncio
async def test_missing_envelope_is_network_failure(mock_http):
    mock_http.request.return_value = _response(payload={"executionId": "exec-9"})
    client = _client(mock_http)

    with pytest.raises(NetworkFailureError, match="envelope"):
        await client.execute_workflow("wf-1", {})


@pytest.mark.asyncio
async def test_server_error_is_network_failure(mock_http):
    mock_http.request.return_value = _response(status_code=500)
    client = _client(mock_http)

    with pytest.raises(NetworkFailureError) as excinfo:
        await client.get_execution("exec-1")

    assert excinfo.value.status_code == 500
    assert not isinstance(excinfo.value, WorkflowEngineUnavailableError)


@pytest.mark.asyncio
async def test_unauthorized_is_auth_error(mock_http):
    mock_http.request.return_value = _response(status_code=401)
    client = _client(mock_http)

    with pytest.raises(WorkflowEngineAuthError):
        await client.list_workflows()


@pytest.mark.asyncio
async def test_connect_error_is_not_retried_by_default(mock_http):
    mock_http.request.side_effect = httpx.ConnectError("refused")
    client = _client(mock_http)

    with pytest.raises(WorkflowEngineUnavailableError):
        await client.list_workflows()

    assert mock_http.request.call_count == 1


@pytest.mark.asyncio
async def test_connect_error_retried_when_configured(mock_http):
    mock_http.request.side_effect = [
        httpx.ConnectError("refused"),
        _response(payload={"data": {"executionId": "exec-2"}}),
    ]
    client = _client(mock_http, max_attempts=2)

    record = await client.execute_workflow("wf-1", {})

    assert record["executionId"] == "exec-2"
    assert mock_http.request.call_count == 2


@pytest.mark.asyncio
async def test_client_errors_are_not_retried(mock_http):
    mock_http.request.return_value = _response(status_code=404)
    client = _client(mock_http, max_attempts=3)

    with pytest.raises(NetworkFailureError):
        await client.get_execution("missing")

    assert mock_http.request.call_count == 1


@pytest.mark.asyncio
async def test_health_check(mock_http, settings):
    connector = N8nConnector(settings)
    connector._client = _client(mock_http)

    assert await connector.health_check() is True
    mock_http.request.assert_awaited_once_with("GET", "/workflows", params={"limit": 1})


@pytest.mark.asyncio
async def test_health_check_failure(mock_http, settings):
    mock_http.request.side_effect = httpx.ConnectError("refused")
    connector = N8nConnector(settings)
    connector._client = _client(mock_http)

    assert await connector.health_check() is False


@pytest.mark.asyncio
async def test_connector_lifecycle_closes_client(mock_http, settings):
    connector = N8nConnector(settings)
    connector._client = _client(mock_http)

    async with connector:
        assert connector.client is not None

    mock_http.aclose.assert_awaited_once()
    assert connector._client is None
