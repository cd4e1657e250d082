from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


@dataclass(frozen=True)
class Settings:
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None
    cors_allow_credentials: bool
    ai_key_min_length: int
    ai_max_numbered_keys: int
    ai_timeout_s: float
    ai_retry_backoff_s: float


settings = Settings(
    rate_limit=_get_env("RATE_LIMIT", "30/minute") or "30/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://localhost:3001",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:3001",
        ],
    ),
    cors_allow_origin_regex=_get_env(
        "CORS_ALLOW_ORIGIN_REGEX",
        r"^https:\/\/.*\.(onrender\.com|render\.com|railway\.app|vercel\.app|herokuapp\.com)$",
    ),
    cors_allow_credentials=_get_env_bool("CORS_ALLOW_CREDENTIALS", True),
    ai_key_min_length=_get_env_int("AI_KEY_MIN_LENGTH", 20),
    ai_max_numbered_keys=_get_env_int("AI_MAX_NUMBERED_KEYS", 10),
    ai_timeout_s=_get_env_float("AI_TIMEOUT_S", 60.0),
    ai_retry_backoff_s=_get_env_float("AI_RETRY_BACKOFF_S", 1.0),
)

if settings.ai_key_min_length < 1:
    raise RuntimeError("AI_KEY_MIN_LENGTH must be a positive integer.")

if settings.ai_timeout_s <= 0:
    raise RuntimeError("AI_TIMEOUT_S must be greater than zero.")

__all__ = ["Settings", "settings"]
