"""Tests for route-rule matching in the YAML security config."""

from pathlib import Path

import pytest

from ministry.authz import ScopeKind
from ministry.security.config import SecurityConfig, SecurityConfigModel, load_security_config

REPO_CONFIG = Path(__file__).resolve().parents[2] / "config" / "security_config.yaml"


def _config(**raw) -> SecurityConfig:
    return SecurityConfig(SecurityConfigModel.model_validate(raw))


def test_repo_config_loads():
    config = load_security_config(REPO_CONFIG)
    assert config.auth.provider == "dummy"

    health = config.match("/health", "GET")
    assert health.auth_required is False

    members = config.match("/members", "get")
    assert members.auth_required is True
    assert members.scope_filter is True

    roles = config.match("/user-roles", "GET")
    assert roles.required_scopes == {ScopeKind.SUPERADMIN, ScopeKind.NATIONAL}


def test_unmatched_route_uses_defaults():
    config = _config(default={"auth_required": True, "scope_filter": False})
    rule = config.match("/anything", "DELETE")
    assert rule.auth_required is True
    assert rule.scope_filter is False
    assert rule.required_scopes == frozenset()


def test_template_path_matches():
    config = _config(routes=[{"path": "/members/{id}", "methods": ["GET", "PUT"], "scope_filter": True}])
    assert config.match("/members/12", "PUT").scope_filter is True
    assert config.match("/members/12/extra", "PUT").scope_filter is False
    assert config.match("/members/12", "DELETE").scope_filter is False


def test_exact_match_wins_over_template():
    config = _config(
        routes=[
            {"path": "/members/{id}", "methods": ["GET"], "required_scopes": ["region"]},
            {"path": "/members/me", "methods": ["GET"], "auth_required": False},
        ]
    )
    assert config.match("/members/me", "GET").auth_required is False
    assert config.match("/members/3", "GET").required_scopes == {ScopeKind.REGION}


def test_scope_requirement_implies_auth_even_with_public_default():
    config = _config(
        default={"auth_required": False},
        routes=[{"path": "/user-roles", "methods": ["POST"], "required_scopes": ["superadmin"]}],
    )
    assert config.match("/user-roles", "POST").auth_required is True
    assert config.match("/user-roles", "GET").auth_required is False


def test_unknown_scope_in_config_is_rejected():
    with pytest.raises(ValueError):
        _config(routes=[{"path": "/x", "required_scopes": ["emperor"]}])


def test_missing_security_key(tmp_path):
    path = tmp_path / "security.yaml"
    path.write_text("routes: []\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Missing top-level 'security' key"):
        load_security_config(path)
