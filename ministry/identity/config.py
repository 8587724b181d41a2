"""Configuration from environment variables. No hardcoded secrets."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _getenv(key: str, default: str | None = None) -> str | None:
    return os.environ.get(key, default)


def _getenv_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class SessionConfig:
    """
    Session token configuration from environment.

    Required:
        SESSION_SECRET: Shared secret the web front end signs session tokens with.

    Optional:
        SESSION_ALGORITHM: JWS algorithm (default HS256).
        SESSION_AUDIENCE: If set, tokens must carry this ``aud``.
        CLOCK_SKEW_SECONDS: Seconds of tolerance for exp/nbf (default 120).
    """

    secret: str
    algorithm: str
    audience: str | None
    clock_skew_seconds: int

    @classmethod
    def from_environ(cls) -> SessionConfig:
        secret = _strip_or_none(_getenv("SESSION_SECRET"))
        if not secret:
            raise _config_error("SESSION_SECRET must be set")
        return cls(
            secret=secret,
            algorithm=(_getenv("SESSION_ALGORITHM") or "HS256").strip().upper(),
            audience=_strip_or_none(_getenv("SESSION_AUDIENCE")),
            clock_skew_seconds=_getenv_int("CLOCK_SKEW_SECONDS", 120),
        )


def _strip_or_none(s: str | None) -> str | None:
    if s is None:
        return None
    t = s.strip()
    return t if t else None


def _config_error(msg: str) -> Exception:
    return ValueError(msg)
