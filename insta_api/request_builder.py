from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from insta_api.config import API_URL
from insta_api.errors import AuthenticationRequired, InvalidArgument
from insta_api.signing import sign, wire_value

METHODS = ("GET", "POST", "DELETE")
DEFAULT_HEADERS = {"Accept": "application/json"}


@dataclass(frozen=True)
class RequestSpec:
    path: str
    params: dict[str, Any] = field(default_factory=dict)
    method: str = "GET"


@dataclass
class PreparedRequest:
    url: str
    method: str
    headers: dict[str, str]
    query: dict[str, Any] | None = None
    form: dict[str, Any] | None = None


def clean_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Drop unset values; the API treats a missing key and ``None`` the same."""
    return {
        key: wire_value(value) for key, value in (params or {}).items() if value is not None
    }


def build(
    spec: RequestSpec,
    access_token: str | None,
    secret: str | None = None,
    signed: bool = False,
    api_url: str = API_URL,
) -> PreparedRequest:
    method = spec.method.upper()
    if method not in METHODS:
        raise InvalidArgument(f"unsupported method {spec.method!r}")
    if not access_token:
        raise AuthenticationRequired(
            f"{spec.path} requires an authenticated user's access token"
        )

    params = clean_params(spec.params)
    payload = dict(params)
    payload["access_token"] = access_token
    if signed:
        payload["sig"] = sign(spec.path, params, access_token, secret)

    url = api_url + spec.path
    if method == "POST":
        return PreparedRequest(url=url, method=method, headers=dict(DEFAULT_HEADERS), form=payload)
    return PreparedRequest(url=url, method=method, headers=dict(DEFAULT_HEADERS), query=payload)
