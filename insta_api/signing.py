"""Request signatures ("signed header" / ``sig`` parameter).

The signing string is the endpoint path with a leading slash followed by
every parameter, ``access_token`` included, sorted by key::

    /users/self/feed|access_token=TOKEN|count=10

Values are rendered as they are sent (booleans as ``true``/``false``, the
rest with ``str()``) and are not escaped. The digest is the
lowercase hex HMAC-SHA256 of that string keyed by the client secret. The
server recomputes the same string, so the format must not change.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Any, Mapping

logger = logging.getLogger("insta-api")


def wire_value(value: Any) -> Any:
    """Render booleans the way httpx encodes them in queries and form bodies."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def signing_string(path: str, params: Mapping[str, Any] | None, access_token: str) -> str:
    merged = dict(params or {})
    merged["access_token"] = access_token
    parts = ["/" + path]
    for key in sorted(merged, key=lambda item: item.encode("utf-8")):
        parts.append(f"|{key}={wire_value(merged[key])}")
    return "".join(parts)


def sign(
    path: str,
    params: Mapping[str, Any] | None,
    access_token: str,
    secret: str | None,
) -> str:
    if not secret:
        # Signs with an empty key rather than failing; the server will reject it.
        logger.warning("signature_secret_missing path=%s", path)
    base_string = signing_string(path, params, access_token)
    return hmac.new(
        (secret or "").encode("utf-8"), base_string.encode("utf-8"), hashlib.sha256
    ).hexdigest()
