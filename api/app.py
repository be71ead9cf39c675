"""FastAPI application for the Shadow Speaking REST API.

Endpoints:
  GET  /v1/shadow/content
  GET  /v1/shadow/content/{content_id}
  POST /v1/shadow/analyze
  GET  /v1/shadow/progress/{learner_id}/{content_id}
  GET  /v1/health
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from shadow_speaking import (
    DEFAULT_CONFIG,
    ContentCatalog,
    ShadowPracticeService,
    __version__,
    load_scoring_config,
)
from shadow_speaking.exceptions import (
    ContentNotFoundError,
    InvalidInputError,
    LevelLockedError,
    ShadowSpeakingError,
)

from .config import Settings
from .routes import shadow

logger = logging.getLogger(__name__)


def create_service(settings: Settings) -> ShadowPracticeService:
    """Build the practice service from the configured content and scoring files."""
    if settings.content_path:
        catalog = ContentCatalog.from_file(settings.content_path)
    else:
        catalog = ContentCatalog.default()
    config = (
        load_scoring_config(settings.scoring_config_path)
        if settings.scoring_config_path
        else DEFAULT_CONFIG
    )
    logger.info("Loaded %d shadow content items", len(catalog))
    return ShadowPracticeService(catalog, config=config)


settings = Settings()

app = FastAPI(
    title="Shadow Speaking API",
    description="REST API for shadow-speaking scoring and level progression.",
    version=__version__,
)
app.state.service = create_service(settings)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Simple in-memory rate limiter based on client IP.

    For production use behind a reverse proxy, prefer nginx/Traefik rate
    limiting instead. This middleware is a safety net for direct exposure.
    """

    def __init__(self, app: ASGIApp, requests_per_minute: int) -> None:
        super().__init__(app)
        self.rpm = requests_per_minute
        self._window: dict[str, list[float]] = {}

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if self.rpm <= 0:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        now = time.monotonic()
        self._prune(now)
        window = self._window.setdefault(client_ip, [])

        if len(window) >= self.rpm:
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limited",
                    "detail": f"Rate limit exceeded ({self.rpm} requests/minute).",
                },
            )

        window.append(now)
        return await call_next(request)

    def _prune(self, now: float) -> None:
        """Drop entries older than 60 seconds and clients left with none."""
        cutoff = now - 60
        for client_ip in list(self._window):
            recent = [t for t in self._window[client_ip] if t > cutoff]
            if recent:
                self._window[client_ip] = recent
            else:
                del self._window[client_ip]


if settings.rate_limit_per_minute > 0:
    app.add_middleware(RateLimitMiddleware, requests_per_minute=settings.rate_limit_per_minute)

# CORS: only allow configured origins. Empty list → no cross-origin access.
if settings.cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

app.include_router(shadow.router, prefix="/v1/shadow", tags=["shadow"])


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


@app.exception_handler(ContentNotFoundError)
async def content_not_found_handler(request: Request, exc: ContentNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"error": "content_not_found", "detail": str(exc)},
    )


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_input", "detail": str(exc)},
    )


@app.exception_handler(LevelLockedError)
async def level_locked_handler(request: Request, exc: LevelLockedError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "error": "level_locked",
            "detail": str(exc),
            "unlocked_level": exc.unlocked,
        },
    )


@app.exception_handler(ShadowSpeakingError)
async def shadow_speaking_error_handler(
    request: Request, exc: ShadowSpeakingError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "shadow_speaking_error", "detail": str(exc)},
    )


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.get("/v1/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}
