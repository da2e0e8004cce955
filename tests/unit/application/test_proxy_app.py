"""End-to-end tests of the proxy application with a mocked upstream."""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from calepin.application.api.rest.app import create_app
from calepin.config import Config


class RecordingUpstream:
    """httpx.MockTransport handler remembering every upstream request."""

    def __init__(self, response: httpx.Response | None = None, error: Exception | None = None) -> None:
        self.response = response or httpx.Response(200, json={"object": "list", "results": []})
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


def client_for(upstream: RecordingUpstream, **overrides) -> TestClient:
    config = Config(**{"notion_secret": "secret_server", **overrides})
    return TestClient(create_app(config, transport=httpx.MockTransport(upstream)))


class TestProxyRouting:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/api/notion/search", "https://api.notion.com/v1/search"),
            ("/api/notion/databases/abc/query", "https://api.notion.com/v1/databases/abc/query"),
            ("/api/notion-proxy/users/me", "https://api.notion.com/v1/users/me"),
            ("/api/notion/api/notion/pages/x", "https://api.notion.com/v1/pages/x"),
        ],
    )
    def test_prefix_is_stripped(self, upstream, path, expected):
        with client_for(upstream) as client:
            response = client.get(path)

        assert response.status_code == 200
        assert str(upstream.requests[0].url) == expected

    def test_routing_param_is_stripped(self, upstream):
        with client_for(upstream) as client:
            client.get("/api/notion", params={"path": "databases/abc", "filter_properties": "title"})

        assert str(upstream.requests[0].url) == (
            "https://api.notion.com/v1/databases/abc?filter_properties=title"
        )

    def test_headers_and_body_forwarded(self, upstream):
        with client_for(upstream) as client:
            client.post("/api/notion/search", json={"query": "jazz"})

        request = upstream.requests[0]
        assert request.method == "POST"
        assert request.headers["Authorization"] == "Bearer secret_server"
        assert request.headers["Notion-Version"] == "2022-06-28"
        assert json.loads(request.content) == {"query": "jazz"}

    def test_upstream_status_and_body_pass_through(self):
        upstream = RecordingUpstream(
            httpx.Response(404, json={"object": "error", "code": "object_not_found"})
        )

        with client_for(upstream) as client:
            response = client.get("/api/notion/pages/missing")

        assert response.status_code == 404
        assert response.json() == {"object": "error", "code": "object_not_found"}
        assert response.headers["content-type"].startswith("application/json")
        assert response.headers["access-control-allow-origin"] == "*"


class TestPreflight:
    @pytest.mark.parametrize("path", ["/api/notion/search", "/anything/else", "/"])
    def test_options_always_ok_and_empty(self, upstream, path):
        with client_for(upstream, notion_secret=None) as client:
            response = client.options(path)

        assert response.status_code == 200
        assert response.content == b""
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PATCH" in response.headers["access-control-allow-methods"]
        assert "Notion-Version" in response.headers["access-control-allow-headers"]
        assert response.headers["access-control-max-age"] == "86400"
        assert upstream.requests == []


class TestProxyErrors:
    def test_missing_secret(self, upstream):
        with client_for(upstream, notion_secret=None) as client:
            response = client.get("/api/notion/search")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "NOTION_SECRET not configured"
        assert "NOTION_SECRET" in body["message"]
        assert upstream.requests == []

    def test_placeholder_secret_counts_as_missing(self, upstream):
        with client_for(upstream, notion_secret="VOTRE_CLE_API_NOTION") as client:
            response = client.get("/api/notion/search")

        assert response.status_code == 500
        assert upstream.requests == []

    @pytest.mark.parametrize("path", ["/api/notion", "/api/notion/"])
    def test_empty_endpoint(self, upstream, path):
        with client_for(upstream) as client:
            response = client.get(path)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid endpoint"
        assert upstream.requests == []

    def test_transport_failure(self):
        upstream = RecordingUpstream(error=httpx.ConnectError("Connection refused"))

        with client_for(upstream) as client:
            response = client.get("/api/notion/users")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Transport error"
        assert body["url"] == "https://api.notion.com/v1/users"
        assert response.headers["access-control-allow-origin"] == "*"

    def test_unexpected_failure_keeps_cors_headers(self):
        upstream = RecordingUpstream(error=RuntimeError("boom"))
        app = create_app(Config(notion_secret="secret_server"), transport=httpx.MockTransport(upstream))

        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/api/notion/users")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert response.headers["access-control-allow-origin"] == "*"


class TestSecretModes:
    def test_header_override(self, upstream):
        with client_for(upstream, proxy={"secret_mode": "header_override"}) as client:
            client.get("/api/notion/users", headers={"X-Notion-Secret": "secret_header"})

        assert upstream.requests[0].headers["Authorization"] == "Bearer secret_header"

    def test_placeholder_header_without_server_secret(self, upstream):
        with client_for(upstream, notion_secret=None, proxy={"secret_mode": "header_override"}) as client:
            response = client.get("/api/notion/users", headers={"X-Notion-Secret": "VOTRE_CLE_API_NOTION"})

        assert response.status_code == 500
        assert response.json()["error"] == "NOTION_SECRET not configured"
        assert upstream.requests == []

    def test_client_bearer(self, upstream):
        with client_for(upstream, notion_secret=None, proxy={"secret_mode": "client"}) as client:
            client.get("/api/notion/users", headers={"Authorization": "Bearer secret_client"})

        assert upstream.requests[0].headers["Authorization"] == "Bearer secret_client"

    def test_client_mode_without_token(self, upstream):
        with client_for(upstream, proxy={"secret_mode": "client"}) as client:
            response = client.get("/api/notion/users")

        assert response.status_code == 500
        assert upstream.requests == []


class TestHealth:
    def test_health(self, upstream):
        with client_for(upstream) as client:
            response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
