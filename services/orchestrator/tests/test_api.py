import base64

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from services.orchestrator.main import create_app

BASE_URL = "https://otcs.test/otcs/cs.exe/api"
AUTH_ENDPOINT = f"{BASE_URL}/v1/auth"


@pytest.fixture
def client(orchestrator_config):
    app = create_app(orchestrator_config)
    with TestClient(app) as test_client:
        yield test_client


def test_health_reports_loaded_endpoints(client):
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    # Two builtins plus the five entries in config/endpoints.yml
    assert data["endpoints"] == 7
    assert "timestamp" in data


@respx.mock
def test_execute_returns_categories(client):
    respx.post(AUTH_ENDPOINT).mock(return_value=httpx.Response(200, json={"ticket": "abc123"}))
    route = respx.get(f"{BASE_URL}/v2/nodes/12345/categories").mock(
        return_value=httpx.Response(200, json={"links": {}, "results": []})
    )

    response = client.post("/api/orchestrate/execute", json={"id": "12345"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json()["data"] == {"links": {}, "results": []}
    assert route.calls.last.request.headers["OTCSTicket"] == "abc123"


@respx.mock
def test_execute_auth_failure_returns_envelope(client):
    respx.post(AUTH_ENDPOINT).mock(return_value=httpx.Response(200, json={"access_token": "x"}))
    upstream = respx.get(f"{BASE_URL}/v2/nodes/12345/categories")

    response = client.post("/api/orchestrate/execute", json={"id": "12345"})

    assert response.status_code == 502
    body = response.json()
    assert body["status"] == "error"
    assert body["errorType"] == "AuthTokenError"
    assert not upstream.called


@respx.mock
def test_execute_missing_id_returns_400(client):
    auth_route = respx.post(AUTH_ENDPOINT)

    response = client.post("/api/orchestrate/execute", json={})

    assert response.status_code == 400
    assert response.json()["errorType"] == "InvalidRequestError"
    assert not auth_route.called


@respx.mock
def test_download_returns_base64_document(client):
    respx.post(AUTH_ENDPOINT).mock(return_value=httpx.Response(200, json={"ticket": "t"}))
    respx.get(f"{BASE_URL}/v2/nodes/42/content").mock(
        return_value=httpx.Response(
            200, content=b"hello", headers={"Content-Type": "text/plain"}
        )
    )

    response = client.post("/api/orchestrate/download", json={"id": 42})

    assert response.status_code == 200
    data = response.json()
    assert base64.b64decode(data["base64Content"]) == b"hello"
    assert data["fileName"] == "node_42"
    assert data["contentType"] == "text/plain"


@respx.mock
def test_dynamic_endpoint_from_config(client):
    respx.post(AUTH_ENDPOINT).mock(return_value=httpx.Response(200, json={"ticket": "t"}))
    respx.get(f"{BASE_URL}/v2/nodes/9").mock(
        return_value=httpx.Response(200, json={"data": {"name": "Enterprise"}})
    )

    response = client.post("/api/dynamic/node-info", json={"id": 9})

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "opentext"
    assert data["operation"] == "node-info"
    assert data["data"] == {"data": {"name": "Enterprise"}}


def test_dynamic_unknown_endpoint(client):
    response = client.post("/api/dynamic/no-such-endpoint", json={})

    assert response.status_code == 400
    assert response.json()["errorType"] == "UnknownEndpointError"


def test_unmatched_route_uses_error_envelope(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    body = response.json()
    assert body["status"] == "error"
    assert body["errorType"] == "UnknownEndpointError"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_request_id_is_generated_when_absent(client):
    response = client.get("/health")

    assert response.headers["X-Request-ID"]
