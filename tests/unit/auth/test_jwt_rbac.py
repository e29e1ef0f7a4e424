from __future__ import annotations

import pytest

from propdesk.auth.jwt import create_access_token, decode_jwt
from propdesk.auth.rbac import get_scopes_for_role, has_scopes, require_scopes
from propdesk.core.exceptions import AuthenticationError, AuthorizationError


def test_access_token_roundtrip_contains_provider_claims():
    token = create_access_token(user_id="user-1", secret="test-secret", email="a@example.com")
    claims = decode_jwt(token, secret="test-secret", audience="authenticated")
    assert claims["sub"] == "user-1"
    assert claims["aud"] == "authenticated"
    assert claims["email"] == "a@example.com"
    assert "exp" in claims
    assert "jti" in claims


def test_decode_rejects_wrong_secret_audience_and_expiry():
    token = create_access_token(user_id="user-1", secret="test-secret")
    with pytest.raises(AuthenticationError, match="signature"):
        decode_jwt(token, secret="other-secret")
    with pytest.raises(AuthenticationError, match="audience"):
        decode_jwt(token, secret="test-secret", audience="service_role")

    expired = create_access_token(user_id="user-1", secret="test-secret", ttl_minutes=-5)
    with pytest.raises(AuthenticationError, match="expired"):
        decode_jwt(expired, secret="test-secret")
    with pytest.raises(AuthenticationError, match="format"):
        decode_jwt("not-a-token", secret="test-secret")


def test_admin_has_every_scope():
    assert has_scopes("admin", ["reports.read", "payments.write"])


def test_tenant_scopes_are_own_only():
    require_scopes("inquilino", ["payments.read_own", "maintenance.create"])
    with pytest.raises(AuthorizationError):
        require_scopes("inquilino", ["payments.read"])


def test_agent_cannot_manage_accounts():
    assert has_scopes("agente", ["properties.write", "agents.read"])
    assert not has_scopes("agente", ["agents.write"])
    assert not has_scopes("agente", ["tenants.write"])


def test_unknown_role_has_no_scopes():
    assert get_scopes_for_role(None) == set()
    assert get_scopes_for_role("visitante") == set()
    assert has_scopes(None, [])
