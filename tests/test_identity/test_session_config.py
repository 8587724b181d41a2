"""Tests for SessionConfig from environment."""

import pytest

from ministry.identity.config import SessionConfig

_VARS = ("SESSION_SECRET", "SESSION_ALGORITHM", "SESSION_AUDIENCE", "CLOCK_SKEW_SECONDS")


@pytest.fixture
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_requires_secret(clean_env):
    with pytest.raises(ValueError, match="SESSION_SECRET must be set"):
        SessionConfig.from_environ()


def test_config_blank_secret_is_missing(clean_env):
    clean_env.setenv("SESSION_SECRET", "   ")
    with pytest.raises(ValueError):
        SessionConfig.from_environ()


def test_config_defaults(clean_env):
    clean_env.setenv("SESSION_SECRET", "s3cret")
    cfg = SessionConfig.from_environ()
    assert cfg.secret == "s3cret"
    assert cfg.algorithm == "HS256"
    assert cfg.audience is None
    assert cfg.clock_skew_seconds == 120


def test_config_overrides(clean_env):
    clean_env.setenv("SESSION_SECRET", "s3cret")
    clean_env.setenv("SESSION_ALGORITHM", "hs512")
    clean_env.setenv("SESSION_AUDIENCE", " ministry-api ")
    clean_env.setenv("CLOCK_SKEW_SECONDS", "30")
    cfg = SessionConfig.from_environ()
    assert cfg.algorithm == "HS512"
    assert cfg.audience == "ministry-api"
    assert cfg.clock_skew_seconds == 30


def test_config_bad_clock_skew_falls_back(clean_env):
    clean_env.setenv("SESSION_SECRET", "s3cret")
    clean_env.setenv("CLOCK_SKEW_SECONDS", "soon")
    assert SessionConfig.from_environ().clock_skew_seconds == 120
