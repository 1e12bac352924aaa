from __future__ import annotations

from dataclasses import dataclass, field
import os

from dotenv import find_dotenv, load_dotenv


def _load_env() -> None:
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path, override=False)


_load_env()


def _get_env(key: str, default: str | None = None) -> str | None:
    value = os.getenv(key)
    if value is None or value == "":
        return default
    return value


def _get_bool(key: str, default: bool = False) -> bool:
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_list(key: str) -> list[str]:
    value = os.getenv(key)
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    database_url: str = field(default_factory=lambda: _get_env("DATABASE_URL", "sqlite:///./feedback.db"))

    # Retry budget for data-store calls issued by request handlers.
    db_max_retries: int = field(default_factory=lambda: _get_int("DB_MAX_RETRIES", 3))
    db_retry_base_delay: float = field(default_factory=lambda: _get_float("DB_RETRY_BASE_DELAY", 1.0))
    db_connect_timeout: float = field(default_factory=lambda: _get_float("DB_CONNECT_TIMEOUT", 5.0))

    cors_allow_origins: list[str] = field(default_factory=lambda: _get_list("CORS_ALLOW_ORIGINS"))
    cors_allow_credentials: bool = field(default_factory=lambda: _get_bool("CORS_ALLOW_CREDENTIALS", False))
    cors_allow_methods: list[str] = field(default_factory=lambda: _get_list("CORS_ALLOW_METHODS"))
    cors_allow_headers: list[str] = field(default_factory=lambda: _get_list("CORS_ALLOW_HEADERS"))

    rate_limit_rpm: int = field(default_factory=lambda: _get_int("RATE_LIMIT_RPM", 120))
    submit_rate_limit_rpm: int = field(default_factory=lambda: _get_int("SUBMIT_RATE_LIMIT_RPM", 30))
    # Only enable behind a proxy that sets X-Forwarded-For itself.
    trust_forwarded_for: bool = field(default_factory=lambda: _get_bool("TRUST_FORWARDED_FOR", False))

    log_level: str = field(default_factory=lambda: (_get_env("LOG_LEVEL", "INFO") or "INFO").upper())
    log_dir: str | None = field(default_factory=lambda: _get_env("LOG_DIR"))
    log_json: bool = field(default_factory=lambda: _get_bool("LOG_JSON", True))


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def refresh_settings() -> Settings:
    """Rebuild settings from environment variables."""
    global _settings
    _settings = Settings()
    return _settings


__all__ = [
    "Settings",
    "get_settings",
    "refresh_settings",
]
