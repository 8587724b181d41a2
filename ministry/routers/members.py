from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ministry.authz import COORDINATE_FIELDS, Operation, OrganizationalCoordinate
from ministry.db.resolver import get_unscoped
from ministry.db.session import get_db
from ministry.models.people import Member
from ministry.schemas.members import MemberIn, MemberOut
from ministry.security.context import AuthzContext
from ministry.security.dependencies import authorize_placement, get_authz, require_access, require_in_scope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["members"])


@router.get("", response_model=list[MemberOut])
def list_members(
    region_id: int | None = None,
    university_id: int | None = None,
    small_group_id: int | None = None,
    alumni_group_id: int | None = None,
    type: str | None = None,
    member_status: str | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
) -> list[Member]:
    # Query filters narrow the caller's scope; they never widen it (see ministry/db/filters.py).
    stmt = select(Member).order_by(Member.id)
    if region_id is not None:
        stmt = stmt.where(Member.region_id == region_id)
    if university_id is not None:
        stmt = stmt.where(Member.university_id == university_id)
    if small_group_id is not None:
        stmt = stmt.where(Member.small_group_id == small_group_id)
    if alumni_group_id is not None:
        stmt = stmt.where(Member.alumni_group_id == alumni_group_id)
    if type:
        stmt = stmt.where(Member.type == type.lower())
    if member_status:
        stmt = stmt.where(Member.status == member_status.lower())
    return list(db.scalars(stmt).all())


@router.get("/{id}", response_model=MemberOut)
def get_member(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> Member:
    member = _get_member(db, id)
    require_access(authz, OrganizationalCoordinate.from_object(member), Operation.READ)
    return member


@router.post("", response_model=MemberOut, status_code=status.HTTP_201_CREATED)
def create_member(payload: MemberIn, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> Member:
    coordinate = authorize_placement(authz, payload.coordinate(), Operation.CREATE, db)

    member = Member(**payload.model_dump(exclude=set(COORDINATE_FIELDS)), **coordinate.as_dict(include_none=True))
    db.add(member)
    _commit(db)
    db.refresh(member)
    logger.info("Member created id=%s by user_id=%s", member.id, authz.user_id)
    return member


@router.put("/{id}", response_model=MemberOut)
def update_member(
    id: int,
    payload: MemberIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> Member:
    member = _get_member(db, id)
    # Caller must reach the member where it is now and where it is going.
    require_in_scope(authz, OrganizationalCoordinate.from_object(member), Operation.UPDATE)
    coordinate = authorize_placement(authz, payload.coordinate(), Operation.UPDATE, db)

    for field, value in payload.model_dump(exclude=set(COORDINATE_FIELDS)).items():
        setattr(member, field, value)
    for field, value in coordinate.as_dict(include_none=True).items():
        setattr(member, field, value)
    _commit(db)
    db.refresh(member)
    return member


@router.delete("/{id}")
def delete_member(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> dict[str, str]:
    member = _get_member(db, id)
    require_access(authz, OrganizationalCoordinate.from_object(member), Operation.DELETE)
    db.delete(member)
    _commit(db)
    logger.info("Member deleted id=%s by user_id=%s", id, authz.user_id)
    return {"message": "Member deleted successfully"}


def _get_member(db: Session, id: int) -> Member:
    member = get_unscoped(db, Member, id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Member not found")
    return member


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Member write rejected: %s", type(exc.orig).__name__)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Member conflicts with an existing record (email already exists or attendance/contributions reference it)",
        ) from exc
