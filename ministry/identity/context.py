"""Serializable context produced after validating a session token."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SessionContext:
    """
    Who is calling. Scope is not part of the session: it is looked up per
    request from ``user_roles`` so role changes apply without re-login.
    """

    user_id: int
    """Primary key in ``users``."""

    email: str | None = None

    name: str | None = None
    """Display name; for UI only."""

    username: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serializable dict."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "username": self.username,
        }
