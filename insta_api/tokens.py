from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union


@dataclass(frozen=True)
class RawToken:
    """An access token obtained outside this client."""

    access_token: str


@dataclass(frozen=True)
class OAuthResult:
    """The decoded body of a successful authorization-code exchange."""

    access_token: str
    user: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_body(cls, body: Mapping[str, Any]) -> OAuthResult:
        user = body.get("user")
        return cls(
            access_token=str(body["access_token"]),
            user=dict(user) if isinstance(user, Mapping) else {},
        )


AccessToken = Union[RawToken, OAuthResult]
