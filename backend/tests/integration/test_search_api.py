"""HTTP-level checks for GET /api/servers/{server_id}/search."""

import sqlite3
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from backend.src.api.main import app
from backend.src.api.middleware import get_auth_service
from backend.src.services.auth import MFA_PURPOSE, AuthService
from backend.src.services.config import AppConfig
from backend.src.services.search import SearchService, get_search_service

pytestmark = pytest.mark.integration


@pytest.fixture()
def auth_service(app_config: AppConfig) -> AuthService:
    return AuthService(config=app_config)


@pytest.fixture()
def client(app_config: AppConfig, db_service, auth_service: AuthService, chat):
    app.dependency_overrides[get_search_service] = lambda: SearchService(db_service, config=app_config)
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides = {}


def _headers(auth_service: AuthService, user_id: str) -> dict:
    return {"Authorization": f"Bearer {auth_service.create_jwt(user_id)}"}


def _search(client: TestClient, headers: dict, server_id: str = "server-s", **params):
    return client.get(f"/api/servers/{server_id}/search", params=params, headers=headers)


def test_missing_token_is_unauthorized(client: TestClient) -> None:
    response = client.get("/api/servers/server-s/search", params={"q": "deploy"})

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_mfa_token_is_unauthorized(client: TestClient, auth_service: AuthService) -> None:
    token = auth_service.create_jwt("bob", purpose=MFA_PURPOSE)

    response = _search(client, {"Authorization": f"Bearer {token}"}, q="deploy")

    assert response.status_code == 401


def test_non_member_gets_403_without_data(client: TestClient, auth_service: AuthService) -> None:
    response = _search(client, _headers(auth_service, "eve"), q="deploy")

    assert response.status_code == 403
    body = response.json()
    assert body == {"error": "forbidden", "message": "Not a member", "detail": None}
    assert "data" not in body


def test_unknown_server_gets_same_403(client: TestClient, auth_service: AuthService) -> None:
    response = _search(client, _headers(auth_service, "bob"), server_id="nope", q="deploy")

    assert response.status_code == 403
    assert response.json()["message"] == "Not a member"


@pytest.mark.parametrize("q", ["", "   "])
def test_blank_query_returns_empty_page(client: TestClient, auth_service: AuthService, q: str) -> None:
    response = _search(client, _headers(auth_service, "bob"), q=q)

    assert response.status_code == 200
    assert response.json() == {"data": [], "nextCursor": None}


def test_missing_q_returns_empty_page(client: TestClient, auth_service: AuthService) -> None:
    response = client.get("/api/servers/server-s/search", headers=_headers(auth_service, "bob"))

    assert response.status_code == 200
    assert response.json() == {"data": [], "nextCursor": None}


def test_deploy_scenario_over_http(client: TestClient, auth_service: AuthService, chat) -> None:
    headers = _headers(auth_service, "bob")

    first = _search(client, headers, q="deploy", limit="2")
    assert first.status_code == 200
    first_body = first.json()
    assert len(first_body["data"]) == 2
    assert first_body["nextCursor"] == first_body["data"][-1]["id"]

    second = _search(client, headers, q="deploy", limit="2", cursor=first_body["nextCursor"])
    second_body = second.json()
    assert len(second_body["data"]) == 2
    assert second_body["nextCursor"] is None

    channels = {m["channelId"] for m in first_body["data"] + second_body["data"]}
    assert channels == {"c1", "c2"}


@pytest.mark.parametrize(("limit", "expected"), [("9999", 4), ("0", 1), ("-5", 1), ("abc", 4)])
def test_malformed_or_out_of_range_limits_are_normalized(
    client: TestClient, auth_service: AuthService, limit: str, expected: int
) -> None:
    response = _search(client, _headers(auth_service, "alice"), q="deploy", limit=limit)

    assert response.status_code == 200
    assert len(response.json()["data"]) == expected


def test_filters_and_unknown_params(client: TestClient, auth_service: AuthService) -> None:
    response = _search(
        client,
        _headers(auth_service, "alice"),
        q="deploy",
        channelId="c1",
        authorId="bob",
        sort="relevance",
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [m["id"] for m in data] == ["m04"]
    assert data[0]["author"]["username"] == "bob"
    assert data[0]["createdAt"].endswith("Z")
    assert data[0]["webhookName"] is None


def test_foreign_channel_returns_empty_page(client: TestClient, auth_service: AuthService) -> None:
    response = _search(client, _headers(auth_service, "alice"), q="deploy", channelId="x")

    assert response.status_code == 200
    assert response.json() == {"data": [], "nextCursor": None}


def test_store_failure_is_a_generic_500(app_config: AppConfig, auth_service: AuthService) -> None:
    failing = Mock(spec=SearchService)
    failing.search.side_effect = sqlite3.OperationalError("unable to open database file")
    app.dependency_overrides[get_search_service] = lambda: failing
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    try:
        response = TestClient(app, raise_server_exceptions=False).get(
            "/api/servers/server-s/search",
            params={"q": "deploy"},
            headers=_headers(auth_service, "alice"),
        )
    finally:
        app.dependency_overrides = {}

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "internal_error"
    assert "database" not in body["message"]


def test_health() -> None:
    response = TestClient(app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
