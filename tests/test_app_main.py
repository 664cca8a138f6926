"""Tests for the FastAPI surface."""

import json
from typing import Iterator, List
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient
from supabase import PostgrestAPIError

from app.dependencies import get_http_client
from app.main import app
from config.settings import Settings, get_settings
from db.client import get_server_client

from tests.conftest import SAMPLE_TRANSCRIPT, make_row

AUTH = {"Authorization": "Bearer access-token"}


@pytest.fixture
def upstream_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def upstream_handler():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"value": "ek_live", "expires_at": 1760000600, "session": {}})

    return handler


@pytest.fixture
def client(
    settings: Settings,
    mock_client: MagicMock,
    upstream_requests: List[httpx.Request],
    upstream_handler,
) -> Iterator[TestClient]:
    """Provide a TestClient with settings, Supabase and the voice API overridden."""

    def http_client() -> Iterator[httpx.Client]:
        def record(request: httpx.Request) -> httpx.Response:
            upstream_requests.append(request)
            return upstream_handler(request)

        with httpx.Client(transport=httpx.MockTransport(record)) as c:
            yield c

    mock_client.auth.get_user.return_value = MagicMock(user=MagicMock(id="user-1"))
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_client] = http_client
    app.dependency_overrides[get_server_client] = lambda: mock_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def table(mock_client: MagicMock) -> MagicMock:
    return mock_client.table.return_value


class TestHealth:
    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "ok"}


class TestRealtimeEndpoint:
    """Tests for POST /api/realtime."""

    def test_returns_client_secret(self, client: TestClient, upstream_requests: List[httpx.Request]) -> None:
        response = client.post("/api/realtime", json={"language": "en"})

        assert response.status_code == 200
        assert response.json() == {"clientSecret": "ek_live"}
        assert len(upstream_requests) == 1
        assert json.loads(upstream_requests[0].content)["session"]["audio"]["output"]["voice"] == "alloy"

    def test_empty_body_uses_defaults(self, client: TestClient) -> None:
        response = client.post("/api/realtime")

        assert response.status_code == 200
        assert response.json() == {"clientSecret": "ek_live"}

    def test_missing_secret_returns_500(
        self, client: TestClient, settings: Settings, upstream_requests: List[httpx.Request]
    ) -> None:
        settings.openai_api_key = None

        response = client.post("/api/realtime", json={"language": "en"})

        assert response.status_code == 500
        assert "OPENAI_API_KEY" in response.json()["error"]
        assert upstream_requests == []

    @pytest.mark.parametrize(
        "upstream_handler",
        [lambda request: httpx.Response(429, json={"error": {"message": "Rate limit reached"}})],
    )
    def test_upstream_failure_returns_500(self, client: TestClient) -> None:
        response = client.post("/api/realtime", json={"customPrompt": "hi"})

        assert response.status_code == 500
        assert response.json() == {"error": "Rate limit reached"}

    @pytest.mark.parametrize(
        "upstream_handler",
        [lambda request: httpx.Response(200, json={"value": {"nested": 1}})],
    )
    def test_non_string_secret_returns_500(self, client: TestClient) -> None:
        response = client.post("/api/realtime", json={"language": "en"})

        assert response.status_code == 500
        assert response.json() == {"error": "Realtime API response did not include a client secret"}


class TestConversationEndpoints:
    """Tests for the /api/conversations routes."""

    def test_requires_authorization(self, client: TestClient) -> None:
        response = client.get("/api/conversations")

        assert response.status_code == 401
        assert response.json() == {"error": "Missing authorization header"}

    def test_rejects_unknown_user(self, client: TestClient, mock_client: MagicMock) -> None:
        mock_client.auth.get_user.return_value = MagicMock(user=None)

        response = client.get("/api/conversations", headers=AUTH)

        assert response.status_code == 401

    def test_save(self, client: TestClient, mock_client: MagicMock, table: MagicMock) -> None:
        table.insert.return_value.execute.return_value = MagicMock(data=[make_row(9)])

        response = client.post(
            "/api/conversations", json={"text": SAMPLE_TRANSCRIPT, "debugLogs": []}, headers=AUTH
        )

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 9
        assert body["content"]["metadata"]["messageCount"] == 3
        mock_client.auth.get_user.assert_called_once_with("access-token")
        (rows,), _ = table.insert.call_args
        assert rows[0]["owner_id"] == "user-1"

    def test_save_rejection_returns_500(self, client: TestClient, table: MagicMock) -> None:
        table.insert.return_value.execute.side_effect = PostgrestAPIError(
            {"message": "violates row-level security policy", "code": "42501", "hint": None, "details": None}
        )

        response = client.post("/api/conversations", json={"text": SAMPLE_TRANSCRIPT}, headers=AUTH)

        assert response.status_code == 500
        assert "row-level security" in response.json()["error"]

    def test_database_unreachable_returns_json_500(self, client: TestClient, table: MagicMock) -> None:
        table.insert.return_value.execute.side_effect = httpx.ConnectError("db unreachable")

        response = client.post("/api/conversations", json={"text": SAMPLE_TRANSCRIPT}, headers=AUTH)

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert "db unreachable" in response.json()["error"]

    def test_list(self, client: TestClient, table: MagicMock) -> None:
        query = table.select.return_value.eq.return_value.order.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[make_row(2), make_row(1)])

        response = client.get("/api/conversations", params={"limit": 5}, headers=AUTH)

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [2, 1]
        table.select.return_value.eq.return_value.order.return_value.limit.assert_called_once_with(5)

    def test_get_other_owner_is_not_found(self, client: TestClient, table: MagicMock) -> None:
        query = table.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[make_row(3, owner_id="someone-else")])

        response = client.get("/api/conversations/3", headers=AUTH)

        assert response.status_code == 404

    def test_get_missing_is_not_found(self, client: TestClient, table: MagicMock) -> None:
        query = table.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[])

        response = client.get("/api/conversations/404", headers=AUTH)

        assert response.status_code == 404
        assert "not found" in response.json()["error"]

    def test_delete(self, client: TestClient, table: MagicMock) -> None:
        query = table.select.return_value.eq.return_value.limit.return_value
        query.execute.return_value = MagicMock(data=[make_row(3)])

        response = client.delete("/api/conversations/3", headers=AUTH)

        assert response.status_code == 204
        table.delete.return_value.eq.assert_called_once_with("id", "3")
