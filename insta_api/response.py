from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from insta_api.errors import ApiError, TransportError

logger = logging.getLogger("insta-api")

RATE_LIMIT_HEADER = "x-ratelimit-remaining"
_UNPARSED: Any = object()


@dataclass(frozen=True)
class ApiResponse:
    http_status: int
    rate_limit_remaining: int | None
    body: Any

    @property
    def data(self) -> Any:
        return self.body.get("data") if isinstance(self.body, dict) else None

    @property
    def meta(self) -> dict[str, Any] | None:
        return self.body.get("meta") if isinstance(self.body, dict) else None

    @property
    def pagination(self) -> dict[str, Any] | None:
        return self.body.get("pagination") if isinstance(self.body, dict) else None


def header_value(headers: Mapping[str, Sequence[str] | str], name: str) -> str | None:
    """Return the first value of ``name``, looked up case-insensitively."""
    wanted = name.lower()
    for key, values in headers.items():
        if key.lower() != wanted:
            continue
        if isinstance(values, str):
            return values
        return values[0] if values else None
    return None


def parse_rate_limit(headers: Mapping[str, Sequence[str] | str]) -> int | None:
    raw = header_value(headers, RATE_LIMIT_HEADER)
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("rate_limit_unparseable value=%r", raw)
        return None


def _numeric_code(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def find_error(body: Any) -> tuple[str, str, int] | None:
    """Locate an error envelope at the top level or under ``meta``."""
    if not isinstance(body, dict):
        return None
    for envelope in (body, body.get("meta")):
        if not isinstance(envelope, dict):
            continue
        error_type = envelope.get("error_type")
        code = _numeric_code(envelope.get("code"))
        if error_type and code is not None:
            return str(error_type), str(envelope.get("error_message") or ""), code
    return None


def decode_body(raw_body: bytes) -> Any:
    if not raw_body or not raw_body.strip():
        raise TransportError("empty response body")
    try:
        return json.loads(raw_body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.warning("response_decode_failed preview=%r", raw_body[:200])
        raise TransportError("response body is not valid JSON") from exc


def interpret(
    raw_status: int,
    raw_headers: Mapping[str, Sequence[str] | str],
    raw_body: bytes,
    rate_limit_remaining: int | None = _UNPARSED,
) -> ApiResponse:
    """Turn a raw transport response into an ``ApiResponse``.

    ``rate_limit_remaining`` is read from the headers unless the caller
    already parsed it. Raises ``TransportError`` for an empty or undecodable
    body and ``ApiError`` when the body is an error envelope.
    """
    if rate_limit_remaining is _UNPARSED:
        rate_limit_remaining = parse_rate_limit(raw_headers)
    body = decode_body(raw_body)
    response = ApiResponse(
        http_status=raw_status,
        rate_limit_remaining=rate_limit_remaining,
        body=body,
    )
    error = find_error(body)
    if error is not None:
        error_type, message, code = error
        logger.warning(
            "api_error status=%s error_type=%s code=%s", raw_status, error_type, code
        )
        raise ApiError(error_type, message, code, http_status=raw_status)
    return response
