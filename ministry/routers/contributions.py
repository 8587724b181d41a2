from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ministry.authz import Operation, OrganizationalCoordinate
from ministry.db.resolver import get_unscoped
from ministry.db.session import get_db
from ministry.models.financial import Contribution
from ministry.models.people import Member
from ministry.schemas.contributions import ContributionIn, ContributionOut
from ministry.security.context import AuthzContext
from ministry.security.dependencies import get_authz, require_access, require_in_scope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contributions", tags=["contributions"])


@router.get("", response_model=list[ContributionOut])
def list_contributions(member_id: int | None = None, db: Session = Depends(get_db)) -> list[Contribution]:
    stmt = select(Contribution).order_by(Contribution.created_at.desc(), Contribution.id.desc())
    if member_id is not None:
        stmt = stmt.where(Contribution.member_id == member_id)
    return list(db.scalars(stmt).all())


@router.get("/{id}", response_model=ContributionOut)
def get_contribution(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> Contribution:
    contribution = _get_contribution(db, id)
    require_access(authz, _coordinate_of(contribution.member), Operation.READ)
    return contribution


@router.post("", response_model=ContributionOut, status_code=status.HTTP_201_CREATED)
def create_contribution(
    payload: ContributionIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> Contribution:
    require_in_scope(authz, _coordinate_of(_get_member(db, payload.member_id)), Operation.CREATE)

    contribution = Contribution(**payload.model_dump())
    db.add(contribution)
    _commit(db)
    db.refresh(contribution)
    logger.info("Contribution created id=%s by user_id=%s", contribution.id, authz.user_id)
    return contribution


@router.put("/{id}", response_model=ContributionOut)
def update_contribution(
    id: int,
    payload: ContributionIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> Contribution:
    contribution = _get_contribution(db, id)
    require_in_scope(authz, _coordinate_of(contribution.member), Operation.UPDATE)
    if payload.member_id != contribution.member_id:
        require_in_scope(authz, _coordinate_of(_get_member(db, payload.member_id)), Operation.UPDATE)

    for field, value in payload.model_dump().items():
        setattr(contribution, field, value)
    _commit(db)
    db.refresh(contribution)
    return contribution


@router.delete("/{id}")
def delete_contribution(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> dict[str, str]:
    contribution = _get_contribution(db, id)
    require_access(authz, _coordinate_of(contribution.member), Operation.DELETE)
    db.delete(contribution)
    db.commit()
    return {"message": "Contribution deleted successfully"}


def _coordinate_of(member: Member | None) -> OrganizationalCoordinate:
    # A contribution without a member sits at the root of the tree.
    if member is None:
        return OrganizationalCoordinate()
    return OrganizationalCoordinate.from_object(member)


def _get_member(db: Session, member_id: int | None) -> Member | None:
    if member_id is None:
        return None
    member = get_unscoped(db, Member, member_id)
    if member is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Member not found")
    return member


def _get_contribution(db: Session, id: int) -> Contribution:
    contribution = get_unscoped(db, Contribution, id)
    if contribution is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Contribution not found")
    return contribution


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Transaction ID already exists") from exc
