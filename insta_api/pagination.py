"""Follow the ``pagination`` block of a previous response.

The API returns a ``next_url`` with the cursor baked into its query string,
plus the cursor itself under one of several keys depending on the endpoint.
The follow-up request is rebuilt from the path and the cursor instead of
replaying ``next_url``: a ``sig`` in that URL was computed over the previous
parameters and would not verify for the new ones.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union
from urllib.parse import urlsplit

from insta_api.config import API_URL
from insta_api.errors import PaginationNotSupported
from insta_api.request_builder import RequestSpec
from insta_api.response import ApiResponse


@dataclass(frozen=True)
class NextMaxId:
    value: Any
    param = "max_id"


@dataclass(frozen=True)
class NextMaxLikeId:
    value: Any
    param = "max_like_id"


@dataclass(frozen=True)
class MaxTagId:
    value: Any
    param = "max_tag_id"


@dataclass(frozen=True)
class NextCursor:
    value: Any
    param = "cursor"


PaginationCursor = Union[NextMaxId, NextMaxLikeId, MaxTagId, NextCursor]

# Checked in this order; the first key present wins.
CURSOR_KEYS: tuple[tuple[str, type], ...] = (
    ("next_max_id", NextMaxId),
    ("next_max_like_id", NextMaxLikeId),
    ("max_tag_id", MaxTagId),
)


def extract_pagination(previous: ApiResponse | Mapping[str, Any] | Any) -> dict[str, Any]:
    body = previous.body if isinstance(previous, ApiResponse) else previous
    pagination = body.get("pagination") if isinstance(body, Mapping) else None
    if not isinstance(pagination, Mapping):
        raise PaginationNotSupported()
    return dict(pagination)


def select_cursor(pagination: Mapping[str, Any]) -> PaginationCursor:
    for key, cursor_type in CURSOR_KEYS:
        if pagination.get(key) is not None:
            return cursor_type(pagination[key])
    return NextCursor(pagination.get("next_cursor"))


def relative_path(url_path: str, api_url: str = API_URL) -> str:
    if url_path.startswith(api_url):
        return url_path[len(api_url):]
    base_path = urlsplit(api_url).path
    path = urlsplit(url_path).path
    if path.startswith(base_path):
        return path[len(base_path):]
    return path.lstrip("/")


def next_request(
    previous: ApiResponse | Mapping[str, Any],
    limit: int = 0,
    api_url: str = API_URL,
) -> RequestSpec | None:
    """Return the request for the page after ``previous``, or ``None`` at the end."""
    pagination = extract_pagination(previous)
    next_url = pagination.get("next_url")
    if not next_url:
        return None
    url_path, separator, query = str(next_url).partition("?")
    if not separator or not query:
        return None
    cursor = select_cursor(pagination)
    return RequestSpec(
        path=relative_path(url_path, api_url),
        params={cursor.param: cursor.value, "count": limit},
        method="GET",
    )
