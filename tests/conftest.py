import json
import sys
from pathlib import Path
from typing import Any

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from insta_api.client import InstagramClient  # noqa: E402
from insta_api.config import ClientCredentials, ClientSettings  # noqa: E402
from insta_api.tokens import RawToken  # noqa: E402
from insta_api.transport import TransportResponse  # noqa: E402


def make_response(
    body: Any,
    status_code: int = 200,
    headers: dict[str, list[str]] | None = None,
) -> TransportResponse:
    raw = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
    return TransportResponse(status_code=status_code, headers=headers or {}, body=raw)


class FakeTransport:
    """Returns queued responses and records every request it was given."""

    def __init__(self, *responses: TransportResponse) -> None:
        self.responses = list(responses)
        self.calls: list[dict[str, Any]] = []

    def queue(self, response: TransportResponse) -> None:
        self.responses.append(response)

    def send(self, url, method, *, query=None, form=None, headers=None) -> TransportResponse:
        self.calls.append(
            {"url": url, "method": method, "query": query, "form": form, "headers": headers}
        )
        if not self.responses:
            raise AssertionError(f"unexpected request {method} {url}")
        return self.responses.pop(0)


@pytest.fixture
def credentials() -> ClientCredentials:
    return ClientCredentials(
        api_key="CLIENT_ID",
        api_secret="SECRET",
        callback_url="https://example.com/oauth/callback?next=/home",
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(credentials: ClientCredentials, transport: FakeTransport) -> InstagramClient:
    return InstagramClient(ClientSettings(credentials=credentials), transport=transport)


@pytest.fixture
def authed_client(client: InstagramClient) -> InstagramClient:
    client.set_access_token(RawToken("TOK"))
    return client
