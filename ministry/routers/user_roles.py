from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from ministry.authz import ScopeKind
from ministry.db.resolver import get_unscoped
from ministry.db.session import get_db
from ministry.models.org import AlumniSmallGroup, Region, SmallGroup, University
from ministry.models.people import User, UserRole
from ministry.schemas.security import CurrentScopeOut, OrgRef, UserRoleIn, UserRoleOut
from ministry.security.context import AuthzContext
from ministry.security.decorators import require_scopes
from ministry.security.dependencies import get_authz

logger = logging.getLogger(__name__)

router = APIRouter(tags=["user-roles"])

_ORG_MODELS = {
    "region_id": Region,
    "university_id": University,
    "small_group_id": SmallGroup,
    "alumni_group_id": AlumniSmallGroup,
}


@router.get("/me/scope", response_model=CurrentScopeOut)
def current_scope(db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> CurrentScopeOut:
    """The caller's active scope, with the names of the units it points at."""

    assignment = authz.assignment

    def ref(field: str) -> OrgRef | None:
        value = getattr(assignment, field)
        if value is None:
            return None
        row = get_unscoped(db, _ORG_MODELS[field], value)
        return OrgRef.model_validate(row) if row is not None else None

    return CurrentScopeOut(
        scope=assignment.scope,
        region=ref("region_id"),
        university=ref("university_id"),
        small_group=ref("small_group_id"),
        alumni_group=ref("alumni_group_id"),
    )


@router.get("/user-roles", response_model=list[UserRoleOut])
def list_user_roles(user_id: int | None = None, db: Session = Depends(get_db)) -> list[UserRole]:
    stmt = select(UserRole).order_by(UserRole.user_id, UserRole.assigned_at.desc(), UserRole.id.desc())
    if user_id is not None:
        stmt = stmt.where(UserRole.user_id == user_id)
    return list(db.scalars(stmt).all())


@router.post("/user-roles", response_model=UserRoleOut, status_code=status.HTTP_201_CREATED)
@require_scopes([ScopeKind.SUPERADMIN.value])
def assign_user_role(
    payload: UserRoleIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> UserRole:
    """
    Give a user a new active scope. Earlier rows are kept as history.
    """

    if get_unscoped(db, User, payload.user_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not found")

    assignment = payload.assignment()
    if assignment.scope_field is not None:
        model = _ORG_MODELS[assignment.scope_field]
        if get_unscoped(db, model, assignment.scope_id) is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{model.__name__} {assignment.scope_id} not found",
            )

    role = UserRole(user_id=payload.user_id, scope=assignment.scope.value, **assignment.coordinate().as_dict(include_none=True))
    db.add(role)
    db.commit()
    db.refresh(role)

    logger.info(
        "Scope assigned user_id=%s scope=%s by user_id=%s",
        payload.user_id,
        assignment.scope.value,
        authz.user_id,
    )
    return role
