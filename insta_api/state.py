from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock


@dataclass
class CallDiagnostics:
    """Status code and rate-limit value of the most recent call.

    Both values are overwritten together by every call, so with several
    threads sharing one client they describe whichever call finished last.
    Use the ``ApiResponse`` returned by each call for per-call values, or one
    client per thread.
    """

    _http_status: int | None = None
    _rate_limit_remaining: int | None = None
    _lock: Lock = field(default_factory=Lock)

    def record(self, http_status: int, rate_limit_remaining: int | None) -> None:
        with self._lock:
            self._http_status = http_status
            self._rate_limit_remaining = rate_limit_remaining

    def snapshot(self) -> tuple[int | None, int | None]:
        with self._lock:
            return self._http_status, self._rate_limit_remaining

    @property
    def http_status(self) -> int | None:
        with self._lock:
            return self._http_status

    @property
    def rate_limit_remaining(self) -> int | None:
        with self._lock:
            return self._rate_limit_remaining
