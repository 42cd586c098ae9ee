from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from insta_api.request_builder import RequestSpec


@dataclass(frozen=True)
class Endpoint:
    path: str
    method: str = "GET"

    def spec(self, params: dict[str, Any] | None = None, **path_args: Any) -> RequestSpec:
        path = self.path.format(
            **{key: quote(str(value), safe="") for key, value in path_args.items()}
        )
        return RequestSpec(path=path, params=dict(params or {}), method=self.method)


ENDPOINTS: dict[str, Endpoint] = {
    # users
    "search_user": Endpoint("users/search"),
    "get_user": Endpoint("users/{user_id}"),
    "get_user_feed": Endpoint("users/self/feed"),
    "get_user_media": Endpoint("users/{user_id}/media/recent"),
    "get_user_likes": Endpoint("users/self/media/liked"),
    "get_user_follows": Endpoint("users/{user_id}/follows"),
    "get_user_follower": Endpoint("users/{user_id}/followed-by"),
    "get_user_requested_by": Endpoint("users/self/requested-by"),
    "get_user_relationship": Endpoint("users/{user_id}/relationship"),
    "modify_relationship": Endpoint("users/{user_id}/relationship", "POST"),
    # media
    "search_media": Endpoint("media/search"),
    "get_media": Endpoint("media/{media_id}"),
    "get_media_by_shortcode": Endpoint("media/shortcode/{shortcode}"),
    "get_media_likes": Endpoint("media/{media_id}/likes"),
    "like_media": Endpoint("media/{media_id}/likes", "POST"),
    "delete_liked_media": Endpoint("media/{media_id}/likes", "DELETE"),
    "get_media_comments": Endpoint("media/{media_id}/comments"),
    "add_media_comment": Endpoint("media/{media_id}/comments", "POST"),
    "delete_media_comment": Endpoint("media/{media_id}/comments/{comment_id}", "DELETE"),
    # tags
    "search_tags": Endpoint("tags/search"),
    "get_tag": Endpoint("tags/{name}"),
    "get_tag_media": Endpoint("tags/{name}/media/recent"),
    # locations
    "get_location": Endpoint("locations/{location_id}"),
    "get_location_media": Endpoint("locations/{location_id}/media/recent"),
    "search_location": Endpoint("locations/search"),
}
