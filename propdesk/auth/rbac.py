"""Role-based authorization helpers."""

from __future__ import annotations

from propdesk.core.exceptions import AuthorizationError

# Scope strings are kept explicit for endpoint-level declarations.
ROLE_SCOPES: dict[str, set[str]] = {
    "admin": {
        "*",
    },
    "agente": {
        "properties.read",
        "properties.write",
        "contracts.read",
        "tenants.read",
        "maintenance.read",
        "notifications.read",
        "payments.read",
        "agents.read",
    },
    "inquilino": {
        "properties.read",
        "payments.read_own",
        "maintenance.create",
        "maintenance.read_own",
        "notifications.read",
    },
}


def get_scopes_for_role(role: str | None) -> set[str]:
    """Return scopes granted to a role."""
    if not role:
        return set()
    return ROLE_SCOPES.get(role.lower(), set())


def has_scopes(role: str | None, required_scopes: list[str] | set[str] | tuple[str, ...]) -> bool:
    """Check if role includes every required scope."""
    granted = get_scopes_for_role(role)
    if "*" in granted:
        return True
    return set(required_scopes).issubset(granted)


def require_scopes(role: str | None, required_scopes: list[str] | set[str] | tuple[str, ...]) -> None:
    """Raise when a role lacks required scopes."""
    if has_scopes(role=role, required_scopes=required_scopes):
        return
    missing = sorted(set(required_scopes) - get_scopes_for_role(role))
    raise AuthorizationError(f"Missing required scopes: {', '.join(missing)}")
