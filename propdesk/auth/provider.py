"""Client for the hosted auth provider's sign-up endpoint."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from propdesk.core.config import Config, get_config
from propdesk.core.exceptions import AuthenticationError, ConfigurationError, ServiceError, ValidationError

logger = logging.getLogger(__name__)

# Provider error messages we translate into domain errors.
KNOWN_ERRORS: tuple[tuple[str, type[Exception], str], ...] = (
    ("already registered", ValidationError, "Email is already registered."),
    ("invalid email", ValidationError, "Email address is invalid."),
    ("password should be", ValidationError, "Password does not meet the provider policy."),
    ("invalid api key", AuthenticationError, "Auth provider rejected the service key."),
)


@dataclass(frozen=True)
class SignUpResult:
    user_id: str
    email: str


def _extract_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if not isinstance(body, dict):
        return response.text or str(body) or f"HTTP {response.status_code}"
    for key in ("msg", "message", "error_description", "error"):
        if body.get(key):
            return str(body[key])
    return f"HTTP {response.status_code}"


def translate_error(message: str) -> Exception:
    lowered = message.lower()
    for needle, exc_type, text in KNOWN_ERRORS:
        if needle in lowered:
            return exc_type(text)
    return ServiceError(message)


class AuthProviderClient:
    """Signs up accounts on behalf of admins (agents and tenants)."""

    def __init__(self, config: Config | None = None, session: requests.Session | None = None) -> None:
        self.config = config or get_config()
        self.session = session or requests.Session()

    def _endpoint(self, path: str) -> str:
        if not self.config.AUTH_URL:
            raise ConfigurationError("AUTH_URL must be configured to create accounts.")
        return f"{self.config.AUTH_URL.rstrip('/')}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        key = self.config.AUTH_SERVICE_KEY
        if not key:
            raise ConfigurationError("AUTH_SERVICE_KEY must be configured to create accounts.")
        return {"apikey": key, "Authorization": f"Bearer {key}", "Content-Type": "application/json"}

    def sign_up(self, email: str, password: str, metadata: dict[str, Any] | None = None) -> SignUpResult:
        payload = {"email": email, "password": password, "data": metadata or {}}
        try:
            response = self.session.post(
                self._endpoint("/signup"),
                json=payload,
                headers=self._headers(),
                timeout=(2, self.config.AUTH_TIMEOUT_SECONDS),
            )
        except requests.exceptions.RequestException as exc:
            logger.error(
                "auth.signup.unreachable",
                extra={"event": "auth.signup.unreachable", "error": str(exc)},
            )
            raise ServiceError("Auth provider is unreachable.") from exc

        if response.status_code >= 400:
            message = _extract_message(response)
            logger.warning(
                "auth.signup.rejected",
                extra={"event": "auth.signup.rejected", "status": response.status_code, "error": message},
            )
            raise translate_error(message)

        body = response.json()
        user = body.get("user") or body
        user_id = user.get("id")
        if not user_id:
            raise ServiceError("Auth provider returned no user id.")
        return SignUpResult(user_id=str(user_id), email=str(user.get("email") or email))
