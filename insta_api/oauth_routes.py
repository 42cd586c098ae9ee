"""OAuth login and callback routes.

``/oauth/login`` sends the user to Instagram's authorize page and
``/oauth/callback`` exchanges the returned code for an access token. The
token is handed back to the caller and not stored anywhere.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import RedirectResponse

from insta_api.client import InstagramClient
from insta_api.errors import ApiError, ConfigurationError, InvalidArgument, TransportError

logger = logging.getLogger("insta-api")

router = APIRouter(prefix="/oauth", tags=["oauth"])


@lru_cache(maxsize=1)
def _env_client() -> InstagramClient:
    return InstagramClient.from_env()


def get_client() -> InstagramClient:
    try:
        return _env_client()
    except ConfigurationError as exc:
        logger.error("oauth_client_unconfigured error=%s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.get("/login")
def start_login(
    scope: list[str] = Query(default=["basic"]),
    client: InstagramClient = Depends(get_client),
) -> RedirectResponse:
    try:
        login_url = client.get_login_url(scope)
    except InvalidArgument as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    logger.info("oauth_login_redirect scopes=%s", "+".join(scope))
    return RedirectResponse(url=login_url, status_code=307)


@router.get("/callback")
def oauth_callback(
    code: str | None = None,
    error: str | None = None,
    error_reason: str | None = None,
    error_description: str | None = None,
    client: InstagramClient = Depends(get_client),
) -> dict[str, Any]:
    if error:
        logger.warning("oauth_callback_denied error=%s reason=%s", error, error_reason)
        raise HTTPException(
            status_code=400,
            detail={"error": error, "reason": error_reason, "description": error_description},
        )
    if not code:
        raise HTTPException(status_code=400, detail="Missing code")
    try:
        result = client.get_oauth_token(code)
    except ApiError as exc:
        raise HTTPException(
            status_code=400,
            detail={"error_type": exc.error_type, "message": exc.message, "code": exc.code},
        ) from exc
    except TransportError as exc:
        logger.exception("oauth_callback_transport_fail")
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ConfigurationError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {"access_token": result.access_token, "user": result.user}


__all__ = ["router", "get_client"]
