"""Exceptions raised by the Instagram API client.

Every error is terminal for the call that raised it. Callers decide whether
to retry the whole call.
"""

from __future__ import annotations


class InstagramError(Exception):
    """Base class for every error raised by insta_api."""


class ConfigurationError(InstagramError):
    """Client credentials or settings are missing or malformed."""


class AuthenticationRequired(InstagramError):
    """An authenticated call was attempted before an access token was set."""


class InvalidArgument(InstagramError, ValueError):
    """A disallowed scope, relationship action or method was requested."""


class TransportError(InstagramError):
    """The request failed after all retries, or the body was empty or not JSON."""


class PaginationNotSupported(InstagramError):
    """The response carries no pagination metadata."""

    def __init__(self, message: str = "this response does not support pagination") -> None:
        super().__init__(message)


class ApiError(InstagramError):
    """The API answered with an error envelope (``error_type`` + ``code``)."""

    def __init__(
        self,
        error_type: str,
        message: str,
        code: int,
        http_status: int | None = None,
    ) -> None:
        super().__init__(f"{error_type}: {message}")
        self.error_type = error_type
        self.message = message
        self.code = code
        self.http_status = http_status

    def __repr__(self) -> str:
        return (
            f"ApiError(error_type={self.error_type!r}, message={self.message!r}, "
            f"code={self.code!r})"
        )
