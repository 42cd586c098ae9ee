import httpx
import pytest
import respx

from insta_api.errors import TransportError
from insta_api.request_builder import RequestSpec, build
from insta_api.signing import signing_string
from insta_api.transport import HttpxTransport

API = "https://api.instagram.com/v1"


def test_get_sends_query_and_collects_headers() -> None:
    with respx.mock(base_url=API) as mock:
        route = mock.get("/users/self").mock(
            return_value=httpx.Response(
                200,
                json={"data": {"id": "1"}},
                headers={"X-Ratelimit-Remaining": "4999"},
            )
        )
        with HttpxTransport() as transport:
            response = transport.send(
                f"{API}/users/self",
                "GET",
                query={"access_token": "TOK"},
                headers={"Accept": "application/json"},
            )
    assert route.called
    request = route.calls.last.request
    assert request.url.params["access_token"] == "TOK"
    assert request.headers["accept"] == "application/json"
    assert response.status_code == 200
    assert response.headers["x-ratelimit-remaining"] == ["4999"]
    assert b'"id": "1"' in response.body or b'"id":"1"' in response.body


def test_post_sends_form_body() -> None:
    with respx.mock(base_url=API) as mock:
        route = mock.post("/media/1/comments").mock(return_value=httpx.Response(200, json={"meta": {"code": 200}}))
        with HttpxTransport() as transport:
            transport.send(f"{API}/media/1/comments", "POST", form={"text": "hi", "access_token": "TOK"})
    request = route.calls.last.request
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert request.content == b"text=hi&access_token=TOK"


def test_http_error_status_is_returned_without_retry() -> None:
    with respx.mock(base_url=API) as mock:
        route = mock.get("/users/1").mock(return_value=httpx.Response(400, json={"meta": {"code": 400}}))
        with HttpxTransport(max_retries=3) as transport:
            response = transport.send(f"{API}/users/1", "GET")
    assert response.status_code == 400
    assert route.call_count == 1


def test_connection_errors_are_retried_then_succeed() -> None:
    with respx.mock(base_url=API) as mock:
        route = mock.get("/users/1").mock(
            side_effect=[httpx.ConnectError("refused"), httpx.ReadTimeout("slow"), httpx.Response(200, json={})]
        )
        with HttpxTransport(max_retries=2) as transport:
            response = transport.send(f"{API}/users/1", "GET")
    assert response.status_code == 200
    assert route.call_count == 3


def test_exhausted_retries_raise_transport_error() -> None:
    with respx.mock(base_url=API) as mock:
        route = mock.get("/users/1").mock(side_effect=httpx.ConnectError("refused"))
        with HttpxTransport(max_retries=2) as transport:
            with pytest.raises(TransportError):
                transport.send(f"{API}/users/1", "GET")
    assert route.call_count == 3


def test_tls_verification_is_enabled_by_default(monkeypatch) -> None:
    captured = {}
    real_client = httpx.Client

    def spy_client(*args, **kwargs):
        captured.update(kwargs)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "Client", spy_client)
    HttpxTransport(connect_timeout=5.0, timeout=30.0).close()
    assert captured["verify"] is True
    assert captured["timeout"] == httpx.Timeout(30.0, connect=5.0)


def test_signed_boolean_param_matches_wire_value() -> None:
    prepared = build(RequestSpec("users/self/feed", {"flag": True}), "TOK", secret="SECRET", signed=True)
    with respx.mock(base_url=API) as mock:
        route = mock.get("/users/self/feed").mock(return_value=httpx.Response(200, json={"data": []}))
        with HttpxTransport() as transport:
            transport.send(prepared.url, prepared.method, query=prepared.query, headers=prepared.headers)
    wire_flag = route.calls.last.request.url.params["flag"]
    assert wire_flag == "true"
    assert f"flag={wire_flag}" in signing_string("users/self/feed", {"flag": True}, "TOK")


def test_corrupt_gzip_body_raises_transport_error_without_retry() -> None:
    with respx.mock(base_url=API) as mock:
        route = mock.get("/users/1").mock(
            return_value=httpx.Response(
                200,
                headers={"Content-Encoding": "gzip"},
                stream=httpx.ByteStream(b"not gzip"),
            )
        )
        with HttpxTransport(max_retries=2) as transport:
            with pytest.raises(TransportError):
                transport.send(f"{API}/users/1", "GET")
    assert route.call_count == 1


def test_invalid_url_raises_transport_error() -> None:
    with HttpxTransport(max_retries=0) as transport:
        with pytest.raises(TransportError):
            transport.send("https://exa mple.com:notaport/users/1", "GET")
