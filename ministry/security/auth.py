from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ministry.authz import ErrorKind, ScopeAssignment
from ministry.identity import SessionTokenValidator, ValidationError
from ministry.models.people import User, UserRole
from ministry.security.config import SecurityConfig

logger = logging.getLogger(__name__)


def extract_bearer_token(request: Request, config: SecurityConfig) -> str | None:
    """
    Read `Authorization: Bearer <token>`.

    Returns None when the header is absent; raises 400 when it is malformed.
    """

    header_name = config.auth.authorization_header
    bearer_prefix = config.auth.bearer_prefix

    raw = request.headers.get(header_name)
    if not raw:
        logger.info("Missing Authorization header (auth required) path=%s method=%s", request.url.path, request.method)
        return None

    prefix = f"{bearer_prefix} "
    if not raw.startswith(prefix):
        logger.warning("Invalid Authorization header format path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Expected '{bearer_prefix} <token>'.",
        )

    token = raw[len(prefix) :].strip()
    if not token:
        logger.warning("Empty bearer token path=%s method=%s", request.url.path, request.method)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {header_name}. Missing token after '{bearer_prefix}'.",
        )
    return token


@lru_cache
def _session_validator() -> SessionTokenValidator:
    return SessionTokenValidator()


def resolve_user_id(token: str, config: SecurityConfig) -> int:
    """
    Map a bearer token to a user id.

    - provider "dummy": the token *is* the integer user id
    - provider "session": the token is a signed session JWT (ministry.identity)
    """

    if config.auth.provider == "session":
        try:
            return _session_validator().validate_and_extract(token).user_id
        except ValidationError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"error": str(exc), "reason": ErrorKind.UNAUTHENTICATED.value},
            ) from exc

    try:
        return int(token)
    except ValueError as exc:
        logger.warning("Bearer token not an int (dummy provider expects user_id)")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid bearer token (expected integer user id).",
        ) from exc


def load_user(db: Session, user_id: int) -> User:
    user = db.execute(select(User).where(User.id == user_id)).scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Invalid or inactive user", "reason": ErrorKind.UNAUTHENTICATED.value},
        )

    return user


def load_scope_assignment(db: Session, user_id: int) -> ScopeAssignment | None:
    """
    The user's active scope: the most recently assigned `user_roles` row.

    Users with several rows are not merged; older rows are history.
    """

    role = db.scalars(
        select(UserRole)
        .where(UserRole.user_id == user_id)
        .order_by(UserRole.assigned_at.desc(), UserRole.id.desc())
        .limit(1)
    ).first()

    if role is None:
        return None
    return ScopeAssignment.from_object(role)
