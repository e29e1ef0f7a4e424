from __future__ import annotations

import pytest

from propdesk.auth.guards import (
    PROFILE_LOOKUP_FAILED,
    WRONG_PANEL,
    area_for_path,
    check_panel_role,
    dashboard_path,
    evaluate_route,
)
from propdesk.core.exceptions import AuthorizationError


def test_public_routes_always_pass():
    for path in ("/", "/login", "/confirm"):
        assert evaluate_route(path, user_id="u1", role=None).allowed


def test_anonymous_visitors_pass_through():
    assert evaluate_route("/admin/dashboard", user_id=None, role=None).allowed


def test_signed_in_user_without_role_is_signed_out():
    decision = evaluate_route("/admin/dashboard", user_id="u1", role=None)
    assert not decision.allowed
    assert decision.redirect_to == "/login"
    assert decision.sign_out


@pytest.mark.parametrize(
    ("path", "role", "redirect"),
    [
        ("/admin/propiedades", "inquilino", "/inquilino/dashboard"),
        ("/inquilino/pagos", "agente", "/agente/dashboard"),
        ("/agente", "admin", "/admin/dashboard"),
    ],
)
def test_wrong_area_redirects_to_own_dashboard(path, role, redirect):
    decision = evaluate_route(path, user_id="u1", role=role)
    assert not decision.allowed
    assert decision.redirect_to == redirect
    assert not decision.sign_out


def test_matching_area_and_unscoped_paths_are_allowed():
    assert evaluate_route("/admin/contratos/123", user_id="u1", role="admin").allowed
    assert evaluate_route("/propiedades/abc", user_id="u1", role="inquilino").allowed


def test_area_prefix_must_be_a_whole_segment():
    assert area_for_path("/administracion") is None
    assert area_for_path("/admin") == "/admin"
    assert area_for_path("/inquilino/perfil") == "/inquilino"
    assert dashboard_path("agente") == "/agente/dashboard"


def test_panel_role_check():
    check_panel_role("admin", "admin")
    with pytest.raises(AuthorizationError, match=WRONG_PANEL):
        check_panel_role("inquilino", "admin")
    with pytest.raises(AuthorizationError, match=PROFILE_LOOKUP_FAILED):
        check_panel_role(None, "admin")
    with pytest.raises(AuthorizationError, match=PROFILE_LOOKUP_FAILED):
        check_panel_role("admin", "admin", lookup_failed=True)
