"""API server configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class Settings:
    """Application settings, configurable via environment variables.

    Environment variables:
        SS_HOST: Server bind address (default "0.0.0.0")
        SS_PORT: Server port (default 8000)
        SS_DEBUG: Enable debug mode ("1" or "true")
        SS_CORS_ORIGINS: Comma-separated allowed origins (default: none, reject cross-origin)
        SS_RATE_LIMIT: Requests per minute per client (default 60, 0 = unlimited)
        SS_CONTENT_PATH: Content JSON file (default: bundled sample catalogue)
        SS_SCORING_CONFIG: YAML file overriding scoring constants (default: none)
    """

    host: str = field(default_factory=lambda: os.getenv("SS_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("SS_PORT", "8000")))
    debug: bool = field(
        default_factory=lambda: os.getenv("SS_DEBUG", "").lower() in ("1", "true")
    )
    cors_origins: list[str] = field(default_factory=lambda: _parse_cors())
    rate_limit_per_minute: int = field(
        default_factory=lambda: int(os.getenv("SS_RATE_LIMIT", "60"))
    )
    content_path: str | None = field(
        default_factory=lambda: os.getenv("SS_CONTENT_PATH") or None
    )
    scoring_config_path: str | None = field(
        default_factory=lambda: os.getenv("SS_SCORING_CONFIG") or None
    )


def _parse_cors() -> list[str]:
    raw = os.getenv("SS_CORS_ORIGINS", "")
    if not raw:
        return []
    return [o.strip() for o in raw.split(",") if o.strip()]
