"""Shared authorization helpers for API v1 route modules."""

from __future__ import annotations

from fastapi import HTTPException

from propdesk.auth.rbac import has_scopes, require_scopes
from propdesk.auth.role_cache import RoleCacheRegistry
from propdesk.core.config import get_config
from propdesk.core.dependencies import CurrentUser, get_current_user
from propdesk.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    PropDeskError,
    ServiceError,
    ValidationError,
)


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError("Authorization header is required.")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Authorization header must use Bearer token.")
    return parts[1].strip()


def authorize(
    authorization: str | None,
    scopes: list[str],
    registry: RoleCacheRegistry | None = None,
) -> CurrentUser:
    token = _extract_bearer_token(authorization)
    user = get_current_user(token=token, settings=get_config(), registry=registry)
    require_scopes(user.role, scopes)
    return user


def authorize_own(
    authorization: str | None,
    scope: str,
    own_scope: str,
    registry: RoleCacheRegistry | None = None,
) -> tuple[CurrentUser, bool]:
    """Authorize either full access (``scope``) or owner-only access (``own_scope``).

    The flag is True when the caller is limited to their own rows.
    """
    user = authorize(authorization, [], registry=registry)
    if has_scopes(user.role, [scope]):
        return user, False
    require_scopes(user.role, [own_scope])
    return user, True


def optional_user(authorization: str | None, registry: RoleCacheRegistry | None = None) -> CurrentUser | None:
    """Anonymous callers get None; a present but invalid token still fails."""
    if authorization is None or not authorization.strip():
        return None
    return authorize(authorization, [], registry=registry)


def map_auth_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, AuthenticationError):
        return 401, str(exc)
    if isinstance(exc, AuthorizationError):
        return 403, str(exc)
    return 401, "Unauthorized."


def map_domain_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, (AuthenticationError, AuthorizationError)):
        return map_auth_error(exc)
    if isinstance(exc, NotFoundError):
        return 404, str(exc)
    if isinstance(exc, ValidationError):
        return 422, str(exc)
    if isinstance(exc, ServiceError):
        return 502, str(exc)
    if isinstance(exc, DatabaseError):
        return 500, "Database operation failed."
    return 500, "Internal server error."


def require_user(
    authorization: str | None,
    scopes: list[str],
    registry: RoleCacheRegistry | None = None,
) -> CurrentUser:
    """``authorize`` for route handlers: auth failures become HTTP errors."""
    try:
        return authorize(authorization=authorization, scopes=scopes, registry=registry)
    except PropDeskError as exc:
        code, detail = map_auth_error(exc)
        raise HTTPException(status_code=code, detail=detail) from exc


def require_user_or_owner(
    authorization: str | None,
    scope: str,
    own_scope: str,
    registry: RoleCacheRegistry | None = None,
) -> tuple[CurrentUser, bool]:
    try:
        return authorize_own(authorization, scope, own_scope, registry=registry)
    except PropDeskError as exc:
        code, detail = map_auth_error(exc)
        raise HTTPException(status_code=code, detail=detail) from exc


def viewer_or_anonymous(authorization: str | None, registry: RoleCacheRegistry | None = None) -> CurrentUser | None:
    try:
        return optional_user(authorization, registry=registry)
    except PropDeskError as exc:
        code, detail = map_auth_error(exc)
        raise HTTPException(status_code=code, detail=detail) from exc
