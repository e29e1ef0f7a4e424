"""Configuration module for the PropDesk application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlparse

from dotenv import load_dotenv

from propdesk.core.exceptions import ConfigurationError

load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration with validation."""

    APP_NAME: str
    APP_VERSION: str
    ENV: str
    DEBUG: bool
    DATABASE_URL: str
    DB_CONNECTIVITY_REQUIRED: bool
    JWT_SECRET: str
    JWT_AUDIENCE: str | None
    AUTH_URL: str | None
    AUTH_SERVICE_KEY: str | None
    AUTH_TIMEOUT_SECONDS: int
    ROLE_CACHE_TTL_SECONDS: float
    DEFAULT_CURRENCY: str
    NOTIFICATIONS_LIMIT: int
    CELERY_BROKER_URL: str
    CELERY_RESULT_BACKEND: str
    API_HOST: str
    API_PORT: int
    API_PREFIX: str
    LOG_LEVEL: str
    LOG_FILE: str

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


def _build_config(env: str | None = None) -> Config:
    resolved_env = (env or os.getenv("ENV", "development")).strip().lower()
    debug = _as_bool(os.getenv("DEBUG"), default=(resolved_env != "production"))
    redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    config = Config(
        APP_NAME="PropDesk",
        APP_VERSION=os.getenv("APP_VERSION", "1.0.0"),
        ENV=resolved_env,
        DEBUG=debug if resolved_env != "production" else False,
        DATABASE_URL=os.getenv("DATABASE_URL", "sqlite:///./propdesk.db"),
        DB_CONNECTIVITY_REQUIRED=_as_bool(
            os.getenv("DB_CONNECTIVITY_REQUIRED"), default=(resolved_env == "production")
        ),
        JWT_SECRET=os.getenv("JWT_SECRET", "change_me_jwt_secret"),
        JWT_AUDIENCE=os.getenv("JWT_AUDIENCE", "authenticated") or None,
        AUTH_URL=os.getenv("AUTH_URL"),
        AUTH_SERVICE_KEY=os.getenv("AUTH_SERVICE_KEY"),
        AUTH_TIMEOUT_SECONDS=int(os.getenv("AUTH_TIMEOUT_SECONDS", "15")),
        ROLE_CACHE_TTL_SECONDS=float(os.getenv("ROLE_CACHE_TTL_SECONDS", "300")),
        DEFAULT_CURRENCY=os.getenv("DEFAULT_CURRENCY", "ARS").upper(),
        NOTIFICATIONS_LIMIT=int(os.getenv("NOTIFICATIONS_LIMIT", "20")),
        CELERY_BROKER_URL=os.getenv("CELERY_BROKER_URL", redis_url),
        CELERY_RESULT_BACKEND=os.getenv("CELERY_RESULT_BACKEND", redis_url),
        API_HOST=os.getenv("API_HOST", "0.0.0.0"),
        API_PORT=int(os.getenv("API_PORT", "8000")),
        API_PREFIX=os.getenv("API_PREFIX", "/api/v1"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
        LOG_FILE=os.getenv("LOG_FILE", ""),
    )
    _validate_config(config)
    return config


def _validate_database_url(database_url: str) -> None:
    parsed = urlparse(database_url)
    if parsed.scheme not in {"sqlite", "postgresql", "postgresql+psycopg", "postgresql+psycopg2"}:
        raise ConfigurationError(
            "DATABASE_URL must use sqlite:// or postgresql:// style URL."
        )
    if parsed.scheme.startswith("postgresql") and not parsed.hostname:
        raise ConfigurationError("PostgreSQL DATABASE_URL is missing hostname.")


def _validate_config(config: Config) -> None:
    _validate_database_url(config.DATABASE_URL)

    if config.AUTH_TIMEOUT_SECONDS < 1:
        raise ConfigurationError("AUTH_TIMEOUT_SECONDS must be >= 1.")
    if config.ROLE_CACHE_TTL_SECONDS < 0:
        raise ConfigurationError("ROLE_CACHE_TTL_SECONDS must be >= 0.")
    if config.NOTIFICATIONS_LIMIT < 1:
        raise ConfigurationError("NOTIFICATIONS_LIMIT must be >= 1.")
    if len(config.DEFAULT_CURRENCY) != 3:
        raise ConfigurationError("DEFAULT_CURRENCY must be a 3-letter ISO code.")
    if config.LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise ConfigurationError("LOG_LEVEL must be one of DEBUG/INFO/WARNING/ERROR/CRITICAL.")
    if config.is_production and "change_me" in config.JWT_SECRET:
        raise ConfigurationError("Production JWT_SECRET uses the placeholder value.")
    if config.is_production and "change_me" in config.DATABASE_URL.lower():
        raise ConfigurationError("Production DATABASE_URL uses placeholder credentials.")


@lru_cache(maxsize=8)
def get_config(env: str | None = None) -> Config:
    """Get validated configuration for the requested environment."""
    return _build_config(env)
