"""
Environment-driven configuration for the expense API.

Values are parsed once into a frozen dataclass so handlers and middleware read
consistent settings; malformed values fail fast with `SettingsError`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_JWT_SECRET = "spendwise-dev-secret-change-in-production"
DEFAULT_CORS_ORIGINS: Tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8501",
)
CORS_ENV_KEYS = ("SPENDWISE_CORS_ORIGINS", "FRONTEND_URL")
SUPPORTED_ENVIRONMENTS = frozenset({"development", "test", "production"})


class SettingsError(RuntimeError):
    """Raised when API configuration cannot be constructed."""


@dataclass(frozen=True, slots=True)
class ApiSettings:
    environment: str
    jwt_secret: str
    jwt_algorithm: str
    jwt_expires_days: int
    rate_limit_per_window: int
    rate_limit_window_seconds: int
    cors_origins: Tuple[str, ...]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"


def load_api_settings() -> ApiSettings:
    """
    Build ApiSettings from the process environment.

    SPENDWISE_ENV selects the environment (default "development"); the JWT secret
    falls back to a development placeholder, which is refused in production.
    """

    environment = _normalize_environment(os.getenv("SPENDWISE_ENV"))
    jwt_secret = (os.getenv("SPENDWISE_JWT_SECRET") or "").strip()
    if not jwt_secret:
        if environment == "production":
            raise SettingsError("SPENDWISE_JWT_SECRET must be set when SPENDWISE_ENV=production")
        jwt_secret = DEFAULT_JWT_SECRET

    expires_days = _parse_int(os.getenv("SPENDWISE_JWT_EXPIRES_DAYS"), 30, "SPENDWISE_JWT_EXPIRES_DAYS")
    if expires_days <= 0:
        raise SettingsError("SPENDWISE_JWT_EXPIRES_DAYS must be positive")

    return ApiSettings(
        environment=environment,
        jwt_secret=jwt_secret,
        jwt_algorithm="HS256",
        jwt_expires_days=expires_days,
        rate_limit_per_window=_parse_int(
            os.getenv("SPENDWISE_RATE_LIMIT_PER_WINDOW"), 100, "SPENDWISE_RATE_LIMIT_PER_WINDOW"
        ),
        rate_limit_window_seconds=_parse_int(
            os.getenv("SPENDWISE_RATE_LIMIT_WINDOW_SECONDS"), 15 * 60, "SPENDWISE_RATE_LIMIT_WINDOW_SECONDS"
        ),
        cors_origins=_resolve_cors_origins(),
    )


def _normalize_environment(raw_value: Optional[str]) -> str:
    candidate = (raw_value or "").strip().lower() or "development"
    if candidate not in SUPPORTED_ENVIRONMENTS:
        raise SettingsError(f"Unsupported SPENDWISE_ENV '{candidate}'")
    return candidate


def _parse_int(raw_value: Optional[str], default: int, env_key: str) -> int:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return int(raw_value)
    except ValueError as exc:
        raise SettingsError(f"{env_key} must be an integer (received '{raw_value}')") from exc


def _resolve_cors_origins() -> Tuple[str, ...]:
    """
    Comma-separated origins from the first populated env var in `CORS_ENV_KEYS`.

    Falls back to localhost defaults for the dev servers.
    """

    for key in CORS_ENV_KEYS:
        raw_value = os.getenv(key)
        if not raw_value:
            continue
        origins = tuple(origin.strip() for origin in raw_value.split(",") if origin.strip())
        if origins:
            # CORSMiddleware expects ["*"] instead of mixing '*' with explicit origins.
            if "*" in origins:
                return ("*",)
            return origins
    return DEFAULT_CORS_ORIGINS
