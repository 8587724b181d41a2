"""
Tests for bearer-token parsing, user loading and scope loading.

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

import time
from datetime import datetime

import jwt
import pytest
from fastapi import HTTPException
from starlette.requests import Request

from ministry.authz import ScopeAssignment, ScopeKind
from ministry.models.people import User, UserRole
from ministry.security import auth
from ministry.security.auth import extract_bearer_token, load_scope_assignment, load_user, resolve_user_id
from ministry.security.config import SecurityConfig, SecurityConfigModel


def _request(authorization: str | None = None) -> Request:
    headers = [(b"authorization", authorization.encode())] if authorization is not None else []
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "path": "/members",
            "root_path": "",
            "query_string": b"",
            "headers": headers,
        }
    )


def _config(provider: str = "dummy") -> SecurityConfig:
    return SecurityConfig(SecurityConfigModel.model_validate({"auth": {"provider": provider}}))


def test_extract_bearer_token():
    assert extract_bearer_token(_request("Bearer 42"), _config()) == "42"


def test_extract_bearer_token_absent_header():
    assert extract_bearer_token(_request(), _config()) is None


@pytest.mark.parametrize("header", ["Basic abc", "Bearer ", "42"])
def test_extract_bearer_token_malformed(header):
    with pytest.raises(HTTPException) as exc_info:
        extract_bearer_token(_request(header), _config())
    assert exc_info.value.status_code == 400


def test_dummy_provider_parses_user_id():
    assert resolve_user_id("7", _config()) == 7


def test_dummy_provider_rejects_non_integer():
    with pytest.raises(HTTPException) as exc_info:
        resolve_user_id("alice", _config())
    assert exc_info.value.status_code == 400


def test_session_provider(monkeypatch):
    secret = "session-secret-that-is-long-enough-for-hs256"
    monkeypatch.setenv("SESSION_SECRET", secret)
    monkeypatch.delenv("SESSION_AUDIENCE", raising=False)
    auth._session_validator.cache_clear()
    try:
        token = jwt.encode({"id": 3, "exp": time.time() + 300}, secret, algorithm="HS256")
        assert resolve_user_id(token, _config("session")) == 3

        with pytest.raises(HTTPException) as exc_info:
            resolve_user_id("garbage", _config("session"))
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail["reason"] == "unauthenticated"
    finally:
        auth._session_validator.cache_clear()


def test_load_user(db_session):
    user = User(name="Test User", email="test@example.org", is_active=True)
    db_session.add(user)
    db_session.commit()

    loaded = load_user(db_session, user.id)
    assert loaded.id == user.id
    assert loaded.email == "test@example.org"


def test_load_user_raises_when_not_found(db_session):
    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, 99999)
    assert exc_info.value.status_code == 401


def test_load_user_raises_when_inactive(db_session):
    user = User(name="Gone", email="gone@example.org", is_active=False)
    db_session.add(user)
    db_session.commit()

    with pytest.raises(HTTPException) as exc_info:
        load_user(db_session, user.id)
    assert exc_info.value.status_code == 401


def test_load_scope_assignment_none_without_roles(db_session):
    user = User(name="No Role", email="norole@example.org")
    db_session.add(user)
    db_session.commit()

    assert load_scope_assignment(db_session, user.id) is None


def test_load_scope_assignment_most_recent_wins(db_session):
    user = User(name="Promoted", email="promoted@example.org")
    db_session.add(user)
    db_session.flush()
    db_session.add_all(
        [
            UserRole(user_id=user.id, scope="smallgroup", small_group_id=1, assigned_at=datetime(2024, 1, 1)),
            UserRole(user_id=user.id, scope="university", university_id=2, assigned_at=datetime(2025, 6, 1)),
            UserRole(user_id=user.id, scope="region", region_id=3, assigned_at=datetime(2023, 1, 1)),
        ]
    )
    db_session.commit()

    assert load_scope_assignment(db_session, user.id) == ScopeAssignment(scope=ScopeKind.UNIVERSITY, university_id=2)


def test_load_scope_assignment_keeps_misconfigured_rows(db_session):
    user = User(name="Broken", email="broken@example.org")
    db_session.add(user)
    db_session.flush()
    db_session.add(UserRole(user_id=user.id, scope="region"))
    db_session.commit()

    assignment = load_scope_assignment(db_session, user.id)
    assert assignment.scope is ScopeKind.REGION
    assert assignment.is_misconfigured
