"""Identity of the caller as seen by the data services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from propdesk.core.enums import ROLE_ADMIN, ROLE_AGENT, ROLE_TENANT
from propdesk.core.exceptions import AuthenticationError


@dataclass(frozen=True)
class Viewer:
    user_id: str
    role: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_agent(self) -> bool:
        return self.role == ROLE_AGENT

    @property
    def is_tenant(self) -> bool:
        return self.role == ROLE_TENANT


def from_claims(claims: dict[str, Any], role: str | None) -> Viewer:
    """Build a viewer from provider token claims and the profile role."""
    subject = claims.get("sub")
    if not subject or not isinstance(subject, str):
        raise AuthenticationError("Token claims are missing the user id.")
    return Viewer(user_id=subject, role=role)
