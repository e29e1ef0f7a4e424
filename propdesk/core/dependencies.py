"""Dependency providers for API handlers and background workers."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import Session

from propdesk.auth.jwt import decode_jwt
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.auth.viewer import Viewer, from_claims
from propdesk.core.config import Config, get_config
from propdesk.core.exceptions import AuthenticationError
from propdesk.database.db import get_db


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    role: str
    claims: dict[str, Any]

    @property
    def viewer(self) -> Viewer:
        return Viewer(user_id=self.user_id, role=self.role)


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def get_db_session() -> Generator[Session, None, None]:
    """Yield SQLAlchemy session for dependency injection."""
    yield from get_db()


@lru_cache(maxsize=1)
def get_role_registry() -> RoleCacheRegistry:
    """Process-wide role cache keyed by user id."""
    return RoleCacheRegistry(ttl_seconds=get_settings().ROLE_CACHE_TTL_SECONDS)


def get_current_user(
    token: str,
    settings: Config | None = None,
    registry: RoleCacheRegistry | None = None,
) -> CurrentUser:
    """Resolve the caller from a provider access token and their profile role."""
    cfg = settings or get_settings()
    claims = decode_jwt(token=token, secret=cfg.JWT_SECRET, audience=cfg.JWT_AUDIENCE)
    viewer = from_claims(claims, role=None)

    role = (registry or get_role_registry()).get_role(viewer.user_id)
    if not role:
        raise AuthenticationError("No profile found for the authenticated user.")
    return CurrentUser(user_id=viewer.user_id, role=role, claims=claims)
