"""
Validate a signed session token (JWT) and extract the caller's identity.

Background for newcomers:
    The web front end signs in users and issues a session JWT signed with a
    shared secret. Every API call carries it as ``Authorization: Bearer <token>``.
    Before we trust **anything** in that token we must:

    1. Verify the **signature** (proves it was issued by our front end).
    2. Check it hasn't **expired** (``exp``) and isn't used before its start
       time (``nbf``).
    3. Check the **audience** (``aud``) when one is configured.

    Only then do we read the claims and build a ``SessionContext``.
"""

from __future__ import annotations

import logging
from typing import Any

import jwt

from .config import SessionConfig
from .context import SessionContext

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Raised when token validation fails. Do not log the token."""

    pass


def _extract_claims(payload: dict[str, Any]) -> SessionContext:
    """
    Build a ``SessionContext`` from a validated payload.

    * **id** - user primary key, as written by the front end's jwt callback.
    * **sub** - fallback when ``id`` is absent (standard subject claim).
    * **email**, **name**, **username** - informational only; never used for authorization.
    """

    raw_id = payload.get("id")
    if raw_id is None:
        raw_id = payload.get("sub")
    try:
        user_id = int(raw_id)
    except (TypeError, ValueError) as e:
        raise ValidationError("Invalid token: user id claim") from e

    def _opt(key: str) -> str | None:
        value = payload.get(key)
        return str(value) if value is not None else None

    return SessionContext(
        user_id=user_id,
        email=_opt("email"),
        name=_opt("name"),
        username=_opt("username"),
    )


class SessionTokenValidator:
    """
    Validates session tokens and extracts the caller's identity.

    Validates signature and exp/nbf (and aud when configured) before using any claim.
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        self._config = config or SessionConfig.from_environ()

    def validate_and_extract(self, token: str) -> SessionContext:
        """
        Validate the session token and return a SessionContext.

        Raises ValidationError if the signature, lifetime or audience checks
        fail, or if the token carries no usable user id.
        """
        if not token:
            raise ValidationError("Invalid token: empty")

        try:
            payload = jwt.decode(
                token,
                self._config.secret,
                algorithms=[self._config.algorithm],
                audience=self._config.audience,
                leeway=self._config.clock_skew_seconds,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_nbf": True,
                    "verify_aud": self._config.audience is not None,
                    "require": ["exp"],
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.info("Session token expired")
            raise ValidationError("Token expired") from e
        except jwt.InvalidAudienceError as e:
            logger.info("Session token invalid audience")
            raise ValidationError("Invalid token: audience") from e
        except jwt.InvalidTokenError as e:
            logger.info("Session token invalid: %s", type(e).__name__)
            raise ValidationError("Invalid token") from e

        return _extract_claims(payload)


def validate_and_extract(token: str, config: SessionConfig | None = None) -> SessionContext:
    """
    Convenience function: validate bearer token and return SessionContext.

    Creates a ``SessionTokenValidator`` (loading config from the environment
    if ``config`` is None) and delegates to its ``validate_and_extract``.
    """
    validator = SessionTokenValidator(config=config)
    return validator.validate_and_extract(token)
