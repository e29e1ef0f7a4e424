from __future__ import annotations

import dataclasses

import pytest
import requests

from propdesk.auth.provider import AuthProviderClient, translate_error
from propdesk.core.config import get_config
from propdesk.core.exceptions import AuthenticationError, ConfigurationError, ServiceError, ValidationError


class _Response:
    def __init__(self, status_code: int, body=None, text: str = "") -> None:
        self.status_code = status_code
        self._body = body
        self.text = text

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class _Session:
    def __init__(self, response=None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.requests: list[dict] = []

    def post(self, url, **kwargs):
        self.requests.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def _config(**overrides):
    values = {"AUTH_URL": "https://auth.example.com/auth/v1/", "AUTH_SERVICE_KEY": "service-key"}
    values.update(overrides)
    return dataclasses.replace(get_config(), **values)


def test_sign_up_posts_credentials_and_metadata():
    session = _Session(_Response(200, {"user": {"id": "new-user", "email": "a@example.com"}}))
    client = AuthProviderClient(config=_config(), session=session)

    result = client.sign_up("a@example.com", "secret123", {"full_name": "Ana", "role": "inquilino"})

    assert result.user_id == "new-user"
    assert result.email == "a@example.com"
    sent = session.requests[0]
    assert sent["url"] == "https://auth.example.com/auth/v1/signup"
    assert sent["json"]["data"] == {"full_name": "Ana", "role": "inquilino"}
    assert sent["headers"]["apikey"] == "service-key"


def test_sign_up_accepts_flat_user_body():
    session = _Session(_Response(200, {"id": "flat-user"}))
    result = AuthProviderClient(config=_config(), session=session).sign_up("b@example.com", "secret123")
    assert result.user_id == "flat-user"
    assert result.email == "b@example.com"


def test_sign_up_translates_provider_errors():
    session = _Session(_Response(422, {"msg": "User already registered"}))
    with pytest.raises(ValidationError, match="already registered"):
        AuthProviderClient(config=_config(), session=session).sign_up("a@example.com", "secret123")


def test_sign_up_unreachable_provider():
    session = _Session(error=requests.exceptions.ConnectionError("refused"))
    with pytest.raises(ServiceError, match="unreachable"):
        AuthProviderClient(config=_config(), session=session).sign_up("a@example.com", "secret123")


def test_sign_up_requires_configuration():
    session = _Session(_Response(200, {"id": "x"}))
    with pytest.raises(ConfigurationError):
        AuthProviderClient(config=_config(AUTH_URL=None), session=session).sign_up("a@example.com", "pw")
    with pytest.raises(ConfigurationError):
        AuthProviderClient(config=_config(AUTH_SERVICE_KEY=None), session=session).sign_up("a@example.com", "pw")
    assert session.requests == []


def test_sign_up_without_user_id_fails():
    session = _Session(_Response(200, {"user": {}}))
    with pytest.raises(ServiceError, match="no user id"):
        AuthProviderClient(config=_config(), session=session).sign_up("a@example.com", "secret123")


def test_translate_error_fallbacks():
    assert isinstance(translate_error("Invalid API key"), AuthenticationError)
    assert isinstance(translate_error("Password should be at least 6 characters"), ValidationError)
    unknown = translate_error("boom")
    assert isinstance(unknown, ServiceError)
    assert str(unknown) == "boom"


@pytest.mark.parametrize("body", [["bad"], "bad request"])
def test_sign_up_error_body_that_is_not_an_object(body):
    session = _Session(_Response(400, body, text="bad request"))
    with pytest.raises(ServiceError, match="bad request"):
        AuthProviderClient(config=_config(), session=session).sign_up("a@example.com", "secret123")
