from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from insta_api.errors import ConfigurationError

logger = logging.getLogger("insta-api")

API_URL = "https://api.instagram.com/v1/"
API_OAUTH_URL = "https://api.instagram.com/oauth/authorize"
API_OAUTH_TOKEN_URL = "https://api.instagram.com/oauth/access_token"

SCOPES = frozenset(
    {"basic", "public_content", "follower_list", "comments", "relationships", "likes"}
)
RELATIONSHIP_ACTIONS = frozenset(
    {"follow", "unfollow", "block", "unblock", "approve", "deny"}
)

DEFAULT_MAX_RETRIES = 5
DEFAULT_CONNECT_TIMEOUT = 20.0
DEFAULT_TIMEOUT = 90.0

API_KEY_ENV = "INSTAGRAM_API_KEY"
API_SECRET_ENV = "INSTAGRAM_API_SECRET"
API_CALLBACK_ENV = "INSTAGRAM_API_CALLBACK"
SIGNED_HEADER_ENV = "INSTAGRAM_SIGNED_HEADER"
MAX_RETRIES_ENV = "INSTAGRAM_MAX_RETRIES"
CONNECT_TIMEOUT_ENV = "INSTAGRAM_CONNECT_TIMEOUT"
TIMEOUT_ENV = "INSTAGRAM_TIMEOUT"


@dataclass(frozen=True)
class ClientCredentials:
    api_key: str
    api_secret: str = ""
    callback_url: str = ""

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError("api_key is required")


@dataclass(frozen=True)
class ClientSettings:
    credentials: ClientCredentials
    signed_header: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    timeout: float = DEFAULT_TIMEOUT
    verify_tls: bool = True

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be zero or positive")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


def _env_number(name: str, default: float, cast: type) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def load_settings() -> ClientSettings:
    """Build client settings from the INSTAGRAM_* environment variables."""
    api_key = os.getenv(API_KEY_ENV, "").strip()
    if not api_key:
        logger.warning("settings_invalid reason=%s_missing", API_KEY_ENV)
        raise ConfigurationError(f"{API_KEY_ENV} is not configured")
    credentials = ClientCredentials(
        api_key=api_key,
        api_secret=os.getenv(API_SECRET_ENV, "").strip(),
        callback_url=os.getenv(API_CALLBACK_ENV, "").strip(),
    )
    return ClientSettings(
        credentials=credentials,
        signed_header=_env_flag(SIGNED_HEADER_ENV),
        max_retries=int(_env_number(MAX_RETRIES_ENV, DEFAULT_MAX_RETRIES, int)),
        connect_timeout=_env_number(CONNECT_TIMEOUT_ENV, DEFAULT_CONNECT_TIMEOUT, float),
        timeout=_env_number(TIMEOUT_ENV, DEFAULT_TIMEOUT, float),
    )
