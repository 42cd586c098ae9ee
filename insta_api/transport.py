from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol

import httpx

from insta_api.config import DEFAULT_CONNECT_TIMEOUT, DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT
from insta_api.errors import TransportError

logger = logging.getLogger("insta-api")


@dataclass
class TransportResponse:
    status_code: int
    headers: dict[str, list[str]] = field(default_factory=dict)
    body: bytes = b""


class Transport(Protocol):
    def send(
        self,
        url: str,
        method: str,
        *,
        query: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse: ...


def _collect_headers(headers: httpx.Headers) -> dict[str, list[str]]:
    collected: dict[str, list[str]] = {}
    for key, value in headers.multi_items():
        collected.setdefault(key, []).append(value)
    return collected


class HttpxTransport:
    """Blocking httpx transport that retries connection-level failures.

    A request is attempted once plus ``max_retries`` more times when httpx
    raises a transport error (connect failure, timeout, reset). HTTP error
    statuses are returned as-is and never retried.
    """

    def __init__(
        self,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        timeout: float = DEFAULT_TIMEOUT,
        verify: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        self.max_retries = max_retries
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout, connect=connect_timeout),
            verify=verify,
        )

    def send(
        self,
        url: str,
        method: str,
        *,
        query: Mapping[str, Any] | None = None,
        form: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> TransportResponse:
        attempts = self.max_retries + 1
        last_error: httpx.TransportError | None = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._client.request(
                    method,
                    url,
                    params=dict(query) if query else None,
                    data=dict(form) if form else None,
                    headers=dict(headers) if headers else None,
                )
            except httpx.TransportError as exc:
                last_error = exc
                logger.warning(
                    "transport_retry method=%s attempt=%s of=%s error=%s",
                    method,
                    attempt,
                    attempts,
                    exc.__class__.__name__,
                )
                continue
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.warning(
                    "transport_fail method=%s attempt=%s error=%s",
                    method,
                    attempt,
                    exc.__class__.__name__,
                )
                raise TransportError(f"request failed: {exc}") from exc
            return TransportResponse(
                status_code=response.status_code,
                headers=_collect_headers(response.headers),
                body=response.content,
            )
        logger.error("transport_fail method=%s attempts=%s", method, attempts)
        raise TransportError(f"request failed after {attempts} attempts: {last_error}") from last_error

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
