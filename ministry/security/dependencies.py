from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from ministry.authz import (
    AccessDecision,
    Operation,
    OrganizationalCoordinate,
    ParentResolver,
    ScopeAssignment,
    ScopeAuthorizer,
    ScopeKind,
)
from ministry.db.resolver import SqlParentResolver
from ministry.db.session import get_db
from ministry.models.people import User
from ministry.security.auth import extract_bearer_token, load_scope_assignment, load_user, resolve_user_id
from ministry.security.config import SecurityConfig
from ministry.security.context import AuthzContext

logger = logging.getLogger(__name__)

authorizer = ScopeAuthorizer()


def get_security_config(request: Request) -> SecurityConfig:
    config = getattr(request.app.state, "security_config", None)
    if config is None:
        raise RuntimeError("Security config not loaded. Did app startup run?")
    return config


def get_current_user(request: Request) -> User:
    user = getattr(request.state, "user", None)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user


def get_authz(request: Request) -> AuthzContext:
    authz = getattr(request.state, "authz", None)
    if authz is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return authz


def enforce_security(
    request: Request,
    config: SecurityConfig = Depends(get_security_config),
    db: Session = Depends(get_db, use_cache=False),
) -> None:
    """
    Global security dependency (configuration-driven).

    Runs after routing, so it can also read decorator metadata, and needs no
    changes to route handlers. Produces `request.state.authz`, which
    `get_db` hands to the scope-filtering listener.
    """

    path = request.url.path
    method = request.method.upper()

    rule = config.match(path, method)

    endpoint = request.scope.get("endpoint")
    decorator_scopes = set(getattr(endpoint, "__security_required_scopes__", set())) if endpoint else set()
    decorator_scope_filter = bool(getattr(endpoint, "__security_scope_filter__", False)) if endpoint else False

    auth_required = rule.auth_required or bool(decorator_scopes) or decorator_scope_filter
    if not auth_required:
        return

    token = extract_bearer_token(request, config)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Unauthorized", "reason": "unauthenticated"},
        )

    user = load_user(db, resolve_user_id(token, config))
    request.state.user = user

    assignment = load_scope_assignment(db, user.id)
    if assignment is None:
        logger.info("No scope assigned user_id=%s path=%s", user.id, path)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No role found for user")

    required_scopes = {ScopeKind(s) for s in rule.required_scopes | decorator_scopes}
    if required_scopes and assignment.scope not in required_scopes:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Insufficient scope. Required one of: {sorted(s.value for s in required_scopes)}",
        )

    scope_filter = rule.scope_filter or decorator_scope_filter
    row_filter = authorizer.filter_for(assignment)
    if scope_filter and row_filter.denied is not None:
        # Misconfigured scope on a filtered listing: 403, never an empty list.
        raise_denied(
            user.id,
            assignment,
            Operation.READ,
            AccessDecision.deny(row_filter.denied, f"{assignment.scope.value} scope has no {assignment.scope_field}"),
        )

    request.state.authz = AuthzContext(
        user_id=user.id,
        assignment=assignment,
        row_filter=row_filter,
        lineage=authorizer.scope_lineage(assignment, SqlParentResolver(db)),
        scope_filter=scope_filter,
    )
    # Tag this session as well; get_db reads request.state only when it opens one.
    db.info["authz"] = request.state.authz


def require_access(
    authz: AuthzContext,
    target: OrganizationalCoordinate,
    op: Operation,
    resolver: ParentResolver | None = None,
) -> AccessDecision:
    """
    Evaluate a single-resource operation; raise 403 with the reason when denied.
    """

    decision = authorizer.can_access(authz.assignment, target, op, resolver)
    if not decision.allowed:
        raise_denied(authz.user_id, authz.assignment, op, decision)
    return decision


def require_in_scope(authz: AuthzContext, target: OrganizationalCoordinate, op: Operation) -> AccessDecision:
    """
    Scope membership only, for coordinates a request references or finds
    stored (the member behind a contribution, a row before its update).
    Forbidden fields apply to what is written; see `authorize_placement`.
    """

    decision = authorizer.can_reach(authz.assignment, target, op)
    if not decision.allowed:
        raise_denied(authz.user_id, authz.assignment, op, decision)
    return decision


def raise_denied(user_id: int, assignment: ScopeAssignment, op: Operation, decision: AccessDecision) -> None:
    logger.info(
        "Access denied user_id=%s scope=%s op=%s reason=%s",
        user_id,
        assignment.scope.value,
        op.value,
        decision.reason.value if decision.reason else None,
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "error": "Access denied",
            "reason": decision.reason.value if decision.reason else None,
            "message": decision.message,
        },
    )


def authorize_placement(
    authz: AuthzContext,
    target: OrganizationalCoordinate,
    op: Operation,
    db: Session,
) -> OrganizationalCoordinate:
    """
    Check a coordinate about to be written (create/update) and return it with
    empty parent ids filled in, so the stored row is visible to every scope
    above it.
    """

    resolver = SqlParentResolver(db)
    require_access(authz, target, op, resolver)
    return authorizer.complete_coordinate(target, resolver)
