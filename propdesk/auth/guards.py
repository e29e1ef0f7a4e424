"""Role-based route guards for the role-scoped areas of the web app."""

from __future__ import annotations

from dataclasses import dataclass

from propdesk.core.enums import ROLE_ADMIN, ROLE_AGENT, ROLE_TENANT
from propdesk.core.exceptions import AuthorizationError

PUBLIC_ROUTES = frozenset({"/", "/login", "/confirm"})
LOGIN_ROUTE = "/login"

# Path prefix -> role required to enter it.
AREA_ROLES: dict[str, str] = {
    "/admin": ROLE_ADMIN,
    "/inquilino": ROLE_TENANT,
    "/agente": ROLE_AGENT,
}

PROFILE_LOOKUP_FAILED = "Error al verificar tu perfil"
WRONG_PANEL = "No tienes permisos para este panel"


@dataclass(frozen=True)
class RouteDecision:
    allowed: bool
    redirect_to: str | None = None
    sign_out: bool = False


ALLOW = RouteDecision(allowed=True)


def dashboard_path(role: str) -> str:
    return f"/{role}/dashboard"


def area_for_path(path: str) -> str | None:
    """Return the area prefix that owns ``path``, if any."""
    for prefix in AREA_ROLES:
        if path == prefix or path.startswith(f"{prefix}/"):
            return prefix
    return None


def evaluate_route(path: str, user_id: str | None, role: str | None) -> RouteDecision:
    """Decide whether a navigation to ``path`` may proceed.

    Anonymous visitors pass through here untouched; the login redirect for
    them belongs to the session layer. A signed-in user without a profile
    role is signed out.
    """
    if path in PUBLIC_ROUTES:
        return ALLOW
    if user_id is None:
        return ALLOW
    if not role:
        return RouteDecision(allowed=False, redirect_to=LOGIN_ROUTE, sign_out=True)

    area = area_for_path(path)
    if area is not None and AREA_ROLES[area] != role:
        return RouteDecision(allowed=False, redirect_to=dashboard_path(role))
    return ALLOW


def check_panel_role(role: str | None, expected_role: str, lookup_failed: bool = False) -> None:
    """Login-time check that the account belongs to the panel being entered."""
    if lookup_failed or role is None:
        raise AuthorizationError(PROFILE_LOOKUP_FAILED)
    if role != expected_role:
        raise AuthorizationError(WRONG_PANEL)
