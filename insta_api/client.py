from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping
from urllib.parse import quote

from insta_api import request_builder
from insta_api.config import (
    API_OAUTH_TOKEN_URL,
    API_OAUTH_URL,
    API_URL,
    RELATIONSHIP_ACTIONS,
    SCOPES,
    ClientCredentials,
    ClientSettings,
    load_settings,
)
from insta_api.endpoints import ENDPOINTS
from insta_api.errors import ConfigurationError, InvalidArgument, TransportError
from insta_api.pagination import next_request
from insta_api.request_builder import PreparedRequest, RequestSpec
from insta_api.response import ApiResponse, interpret, parse_rate_limit
from insta_api.state import CallDiagnostics
from insta_api.tokens import AccessToken, OAuthResult
from insta_api.transport import HttpxTransport, Transport

logger = logging.getLogger("insta-api")


class InstagramClient:
    """Client for the Instagram v1 REST API.

    Every endpoint method returns an ``ApiResponse``. The status code and
    rate-limit value of the latest call are also kept on the client
    (``last_http_status``, ``rate_limit_remaining``); see ``CallDiagnostics``
    for the caveats when one client is shared between threads.
    """

    def __init__(
        self,
        settings: ClientSettings | ClientCredentials | None,
        transport: Transport | None = None,
        api_url: str = API_URL,
    ) -> None:
        if settings is None:
            raise ConfigurationError("client configuration data is missing")
        if isinstance(settings, ClientCredentials):
            settings = ClientSettings(credentials=settings)
        self.settings = settings
        self.credentials = settings.credentials
        self.api_url = api_url
        self._signed_header = settings.signed_header
        self._access_token: str | None = None
        self._diagnostics = CallDiagnostics()
        self._transport = transport or HttpxTransport(
            max_retries=settings.max_retries,
            connect_timeout=settings.connect_timeout,
            timeout=settings.timeout,
            verify=settings.verify_tls,
        )

    @classmethod
    def from_env(cls, transport: Transport | None = None) -> InstagramClient:
        return cls(load_settings(), transport=transport)

    # -- authentication -------------------------------------------------

    def get_login_url(self, scopes: Iterable[str] = ("basic",)) -> str:
        if isinstance(scopes, str):
            raise InvalidArgument("scopes must be a list of scope names")
        requested = list(scopes)
        unknown = [scope for scope in requested if scope not in SCOPES]
        if not requested or unknown:
            raise InvalidArgument(f"invalid scope permissions requested: {unknown or requested}")
        if not self.credentials.callback_url:
            raise ConfigurationError("callback_url is required to build the login URL")
        query = "&".join(
            [
                f"client_id={quote(self.credentials.api_key, safe='')}",
                f"redirect_uri={quote(self.credentials.callback_url, safe='')}",
                f"scope={'+'.join(requested)}",
                "response_type=code",
            ]
        )
        return f"{API_OAUTH_URL}?{query}"

    def get_oauth_token(self, code: str, token_only: bool = False) -> OAuthResult | str:
        """Exchange the ``code`` from the OAuth callback for an access token."""
        if not code:
            raise InvalidArgument("an authorization code is required")
        if not self.credentials.api_secret or not self.credentials.callback_url:
            raise ConfigurationError("api_secret and callback_url are required for the token exchange")
        form = {
            "grant_type": "authorization_code",
            "client_id": self.credentials.api_key,
            "client_secret": self.credentials.api_secret,
            "redirect_uri": self.credentials.callback_url,
            "code": code,
        }
        prepared = PreparedRequest(
            url=API_OAUTH_TOKEN_URL,
            method="POST",
            headers=dict(request_builder.DEFAULT_HEADERS),
            form=form,
        )
        response = self._send(prepared, label="oauth/access_token")
        if not isinstance(response.body, dict) or not response.body.get("access_token"):
            logger.warning("oauth_exchange_fail status=%s reason=access_token_missing", response.http_status)
            raise TransportError("token response did not include an access_token")
        result = OAuthResult.from_body(response.body)
        logger.info("oauth_exchange_success user_id=%s", result.user.get("id"))
        return result.access_token if token_only else result

    def set_access_token(self, token: AccessToken) -> None:
        self._access_token = token.access_token

    @property
    def access_token(self) -> str | None:
        return self._access_token

    def set_signed_header(self, signed_header: bool) -> None:
        self._signed_header = bool(signed_header)

    @property
    def signed_header(self) -> bool:
        return self._signed_header

    # -- diagnostics -----------------------------------------------------

    @property
    def last_http_status(self) -> int | None:
        return self._diagnostics.http_status

    @property
    def rate_limit_remaining(self) -> int | None:
        return self._diagnostics.rate_limit_remaining

    # -- calls -----------------------------------------------------------

    def call(self, path: str, params: Mapping[str, Any] | None = None, method: str = "GET") -> ApiResponse:
        return self.execute(RequestSpec(path=path, params=dict(params or {}), method=method))

    def execute(self, spec: RequestSpec) -> ApiResponse:
        prepared = request_builder.build(
            spec,
            self._access_token,
            secret=self.credentials.api_secret,
            signed=self._signed_header,
            api_url=self.api_url,
        )
        return self._send(prepared, label=spec.path)

    def _send(self, prepared: PreparedRequest, label: str) -> ApiResponse:
        raw = self._transport.send(
            prepared.url,
            prepared.method,
            query=prepared.query,
            form=prepared.form,
            headers=prepared.headers,
        )
        rate_limit_remaining = parse_rate_limit(raw.headers)
        self._diagnostics.record(raw.status_code, rate_limit_remaining)
        logger.info(
            "api_call path=%s method=%s status=%s rate_limit_remaining=%s",
            label,
            prepared.method,
            raw.status_code,
            rate_limit_remaining,
        )
        return interpret(raw.status_code, raw.headers, raw.body, rate_limit_remaining)

    def _endpoint(self, endpoint_name: str, params: Mapping[str, Any] | None = None, **path_args: Any) -> ApiResponse:
        return self.execute(ENDPOINTS[endpoint_name].spec(dict(params or {}), **path_args))

    # -- pagination ------------------------------------------------------

    def pagination(self, previous: ApiResponse | Mapping[str, Any], limit: int = 0) -> ApiResponse | None:
        """Fetch the page after ``previous``; ``None`` when there is none."""
        spec = next_request(previous, limit, api_url=self.api_url)
        if spec is None:
            logger.info("pagination_end")
            return None
        return self.execute(spec)

    def iter_pages(
        self,
        response: ApiResponse,
        limit: int = 0,
        max_pages: int | None = None,
    ) -> Iterator[ApiResponse]:
        """Yield ``response`` and every following page."""
        page: ApiResponse | None = response
        yielded = 0
        while page is not None:
            yield page
            yielded += 1
            if max_pages is not None and yielded >= max_pages:
                return
            if not isinstance(page.pagination, Mapping):
                return
            page = self.pagination(page, limit)

    # -- users -----------------------------------------------------------

    def search_user(self, name: str, **params: Any) -> ApiResponse:
        return self._endpoint("search_user", {**params, "q": name})

    def get_user(self, user_id: int | str = "self") -> ApiResponse:
        return self._endpoint("get_user", user_id=user_id)

    def get_user_feed(self, **params: Any) -> ApiResponse:
        return self._endpoint("get_user_feed", params)

    def get_user_media(self, user_id: int | str = "self", **params: Any) -> ApiResponse:
        return self._endpoint("get_user_media", params, user_id=user_id)

    def get_user_likes(self, **params: Any) -> ApiResponse:
        return self._endpoint("get_user_likes", params)

    def get_user_follows(self, user_id: int | str = "self", **params: Any) -> ApiResponse:
        return self._endpoint("get_user_follows", params, user_id=user_id)

    def get_user_follower(self, user_id: int | str = "self", **params: Any) -> ApiResponse:
        return self._endpoint("get_user_follower", params, user_id=user_id)

    def get_user_requested_by(self) -> ApiResponse:
        return self._endpoint("get_user_requested_by")

    def get_user_relationship(self, user_id: int | str) -> ApiResponse:
        return self._endpoint("get_user_relationship", user_id=user_id)

    def modify_relationship(self, action: str, user_id: int | str | None) -> ApiResponse:
        """Follow, unfollow, block, unblock, approve or deny ``user_id``."""
        if action not in RELATIONSHIP_ACTIONS:
            raise InvalidArgument(f"unknown relationship action {action!r}")
        if user_id is None or user_id == "":
            raise InvalidArgument("a target user id is required")
        return self._endpoint("modify_relationship", {"action": action}, user_id=user_id)

    # -- media -----------------------------------------------------------

    def search_media(
        self,
        lat: float,
        lng: float,
        distance: int = 1000,
        min_timestamp: int | None = None,
        max_timestamp: int | None = None,
    ) -> ApiResponse:
        params = {
            "lat": lat,
            "lng": lng,
            "distance": distance,
            "min_timestamp": min_timestamp,
            "max_timestamp": max_timestamp,
        }
        return self._endpoint("search_media", params)

    def get_media(self, media_id: int | str) -> ApiResponse:
        # Non-numeric ids are shortcodes taken from media URLs.
        if isinstance(media_id, int) or str(media_id).isdigit():
            return self._endpoint("get_media", media_id=media_id)
        return self._endpoint("get_media_by_shortcode", shortcode=media_id)

    def get_media_likes(self, media_id: int | str) -> ApiResponse:
        return self._endpoint("get_media_likes", media_id=media_id)

    def like_media(self, media_id: int | str) -> ApiResponse:
        return self._endpoint("like_media", media_id=media_id)

    def delete_liked_media(self, media_id: int | str) -> ApiResponse:
        return self._endpoint("delete_liked_media", media_id=media_id)

    def get_media_comments(self, media_id: int | str) -> ApiResponse:
        return self._endpoint("get_media_comments", media_id=media_id)

    def add_media_comment(self, media_id: int | str, text: str) -> ApiResponse:
        return self._endpoint("add_media_comment", {"text": text}, media_id=media_id)

    def delete_media_comment(self, media_id: int | str, comment_id: int | str) -> ApiResponse:
        return self._endpoint("delete_media_comment", media_id=media_id, comment_id=comment_id)

    # -- tags ------------------------------------------------------------

    def search_tags(self, name: str) -> ApiResponse:
        return self._endpoint("search_tags", {"q": name})

    def get_tag(self, name: str) -> ApiResponse:
        return self._endpoint("get_tag", name=name)

    def get_tag_media(self, name: str, **params: Any) -> ApiResponse:
        return self._endpoint("get_tag_media", params, name=name)

    # -- locations -------------------------------------------------------

    def get_location(self, location_id: int | str) -> ApiResponse:
        return self._endpoint("get_location", location_id=location_id)

    def get_location_media(self, location_id: int | str, **params: Any) -> ApiResponse:
        return self._endpoint("get_location_media", params, location_id=location_id)

    def search_location(self, lat: float, lng: float, distance: int = 1000) -> ApiResponse:
        return self._endpoint("search_location", {"lat": lat, "lng": lng, "distance": distance})
