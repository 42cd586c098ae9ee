import logging
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from conftest import FakeTransport, make_response
from insta_api.client import InstagramClient
from insta_api.config import ClientCredentials
from insta_api.oauth_routes import _env_client, get_client
from main import _outcome, app

CALLBACK = "https://example.com/oauth/callback"


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def http(transport: FakeTransport):
    instagram = InstagramClient(
        ClientCredentials(api_key="CLIENT_ID", api_secret="SECRET", callback_url=CALLBACK),
        transport=transport,
    )
    app.dependency_overrides[get_client] = lambda: instagram
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health() -> None:
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "api_url": "https://api.instagram.com/v1/"}


def test_login_redirects_to_authorize_url(http: TestClient) -> None:
    response = http.get("/oauth/login", params=[("scope", "basic"), ("scope", "likes")], follow_redirects=False)
    assert response.status_code == 307
    location = response.headers["location"]
    assert location.startswith("https://api.instagram.com/oauth/authorize?")
    assert "scope=basic+likes" in location
    assert f"redirect_uri={quote(CALLBACK, safe='')}" in location
    assert "response_type=code" in location


def test_login_with_unknown_scope_is_rejected(http: TestClient) -> None:
    response = http.get("/oauth/login", params={"scope": "bogus"}, follow_redirects=False)
    assert response.status_code == 400


def test_callback_exchanges_code(http: TestClient, transport: FakeTransport) -> None:
    transport.queue(make_response({"access_token": "NEW", "user": {"id": "1", "username": "snoopdogg"}}))
    response = http.get("/oauth/callback", params={"code": "CODE"})
    assert response.status_code == 200
    assert response.json() == {"access_token": "NEW", "user": {"id": "1", "username": "snoopdogg"}}
    assert transport.calls[0]["form"]["code"] == "CODE"


def test_callback_without_code(http: TestClient, transport: FakeTransport) -> None:
    response = http.get("/oauth/callback")
    assert response.status_code == 400
    assert transport.calls == []


def test_callback_user_denied(http: TestClient) -> None:
    response = http.get(
        "/oauth/callback",
        params={"error": "access_denied", "error_reason": "user_denied", "error_description": "The user denied your request"},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "user_denied"


def test_callback_api_error(http: TestClient, transport: FakeTransport) -> None:
    transport.queue(
        make_response(
            {"error_type": "OAuthException", "error_message": "No matching code found.", "code": 400},
            status_code=400,
        )
    )
    response = http.get("/oauth/callback", params={"code": "CODE"})
    assert response.status_code == 400
    assert response.json()["detail"] == {
        "error_type": "OAuthException",
        "message": "No matching code found.",
        "code": 400,
    }


def test_callback_transport_error(http: TestClient, transport: FakeTransport) -> None:
    transport.queue(make_response(b""))
    response = http.get("/oauth/callback", params={"code": "CODE"})
    assert response.status_code == 502


def test_unconfigured_environment_returns_503(monkeypatch) -> None:
    monkeypatch.delenv("INSTAGRAM_API_KEY", raising=False)
    _env_client.cache_clear()
    response = TestClient(app).get("/oauth/login", follow_redirects=False)
    assert response.status_code == 503
    _env_client.cache_clear()


def test_request_log_names_step_and_outcome_without_query(
    http: TestClient, transport: FakeTransport, caplog
) -> None:
    transport.queue(make_response({"access_token": "NEW", "user": {}}))
    caplog.set_level(logging.INFO, logger="insta-api")
    http.get("/oauth/callback", params={"code": "SECRET_CODE"})
    lines = [record.getMessage() for record in caplog.records if record.getMessage().startswith("http_request")]
    assert lines
    assert "step=callback" in lines[-1]
    assert "status=200 outcome=ok" in lines[-1]
    assert "SECRET_CODE" not in " ".join(lines)


def test_outcome_labels() -> None:
    assert _outcome(200) == "ok"
    assert _outcome(307) == "redirected"
    assert _outcome(400) == "rejected"
    assert _outcome(502) == "failed"
