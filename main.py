from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, Response

from insta_api.config import API_URL
from insta_api.oauth_routes import router as oauth_router

logger = logging.getLogger("insta-api")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

app = FastAPI(title="Instagram OAuth Login")


def _outcome(status: int) -> str:
    if status < 400:
        return "redirected" if status in (302, 303, 307) else "ok"
    return "rejected" if status < 500 else "failed"


@app.middleware("http")
async def log_oauth_requests(request: Request, call_next) -> Response:
    started = time.perf_counter()
    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
        return response
    finally:
        # Query strings carry OAuth codes; only the path is logged.
        logger.info(
            "http_request step=%s status=%s outcome=%s duration_ms=%.2f",
            request.url.path.rsplit("/", 1)[-1] or "root",
            status,
            _outcome(status),
            (time.perf_counter() - started) * 1000,
        )


@app.get("/health")
def health() -> dict[str, str | bool]:
    return {"ok": True, "api_url": API_URL}


app.include_router(oauth_router)
