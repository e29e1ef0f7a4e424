"""Startup validation and bootstrap helpers."""

from __future__ import annotations

import logging
from typing import Any

from propdesk.core.config import Config, get_config
from propdesk.core.logging_config import configure_logging
from propdesk.database.db import get_active_database_url, verify_database_connection

logger = logging.getLogger(__name__)


def _scheme(url: str) -> str:
    return url.split("://", 1)[0] if "://" in url else "unknown"


def startup_summary(config: Config, database_url: str, database_ok: bool) -> dict[str, Any]:
    """Secret-free snapshot of the settings the process started with."""
    return {
        "version": config.APP_VERSION,
        "database_url_scheme": _scheme(database_url),
        "database_reachable": database_ok,
        "db_connectivity_required": config.DB_CONNECTIVITY_REQUIRED,
        "auth_provider_configured": bool(config.AUTH_URL and config.AUTH_SERVICE_KEY),
        "jwt_audience": config.JWT_AUDIENCE,
        "role_cache_ttl_seconds": config.ROLE_CACHE_TTL_SECONDS,
        "default_currency": config.DEFAULT_CURRENCY,
        "notifications_limit": config.NOTIFICATIONS_LIMIT,
        "api_prefix": config.API_PREFIX,
        "celery_broker_scheme": _scheme(config.CELERY_BROKER_URL),
    }


def validate_startup_config() -> None:
    """Fail-fast config and connectivity checks."""
    config = get_config()
    database_ok = verify_database_connection()
    active_database_url = get_active_database_url()
    if not database_ok and config.DB_CONNECTIVITY_REQUIRED:
        raise RuntimeError("Database connectivity check failed.")
    if not database_ok:
        logger.warning(
            "startup.database.connectivity_optional_failed",
            extra={"event": "startup.database.connectivity_optional_failed"},
        )

    if config.is_production and active_database_url.startswith("sqlite"):
        logger.warning(
            "startup.production.sqlite_detected",
            extra={"event": "startup.production.sqlite_detected"},
        )
    if not config.AUTH_URL or not config.AUTH_SERVICE_KEY:
        logger.warning(
            "startup.auth_provider.unconfigured",
            extra={"event": "startup.auth_provider.unconfigured"},
        )

    logger.info(
        "startup.config.validated",
        extra={"event": "startup.config.validated", **startup_summary(config, active_database_url, database_ok)},
    )


def bootstrap() -> None:
    """Initialize logging and validate runtime configuration."""
    configure_logging()
    validate_startup_config()
