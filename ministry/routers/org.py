from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ministry.authz import Operation, OrganizationalCoordinate
from ministry.db.resolver import get_unscoped
from ministry.db.session import get_db
from ministry.models.org import AlumniSmallGroup, Region, SmallGroup, University
from ministry.schemas.org import (
    AlumniGroupCreate,
    AlumniGroupOut,
    RegionCreate,
    RegionOut,
    SmallGroupCreate,
    SmallGroupOut,
    UniversityCreate,
    UniversityOut,
)
from ministry.security.context import AuthzContext
from ministry.security.dependencies import authorize_placement, get_authz

router = APIRouter(tags=["organization"])

# Listings are scope-filtered: a university user sees its own university, its
# region and its small groups, and no alumni groups.


@router.get("/regions", response_model=list[RegionOut])
def list_regions(db: Session = Depends(get_db)) -> list[Region]:
    return list(db.scalars(select(Region).order_by(Region.name)).all())


@router.post("/regions", response_model=RegionOut, status_code=status.HTTP_201_CREATED)
def create_region(payload: RegionCreate, db: Session = Depends(get_db)) -> Region:
    region = Region(name=payload.name)
    db.add(region)
    _commit(db, "Region name already exists")
    db.refresh(region)
    return region


@router.get("/universities", response_model=list[UniversityOut])
def list_universities(region_id: int | None = None, db: Session = Depends(get_db)) -> list[University]:
    stmt = select(University).order_by(University.name)
    if region_id is not None:
        stmt = stmt.where(University.region_id == region_id)
    return list(db.scalars(stmt).all())


@router.post("/universities", response_model=UniversityOut, status_code=status.HTTP_201_CREATED)
def create_university(payload: UniversityCreate, db: Session = Depends(get_db)) -> University:
    _require_region(db, payload.region_id)
    university = University(name=payload.name, region_id=payload.region_id)
    db.add(university)
    _commit(db, "University already exists")
    db.refresh(university)
    return university


@router.get("/small-groups", response_model=list[SmallGroupOut])
def list_small_groups(
    university_id: int | None = None,
    region_id: int | None = None,
    db: Session = Depends(get_db),
) -> list[SmallGroup]:
    stmt = select(SmallGroup).order_by(SmallGroup.name)
    if university_id is not None:
        stmt = stmt.where(SmallGroup.university_id == university_id)
    if region_id is not None:
        stmt = stmt.where(SmallGroup.region_id == region_id)
    return list(db.scalars(stmt).all())


@router.post("/small-groups", response_model=SmallGroupOut, status_code=status.HTTP_201_CREATED)
def create_small_group(
    payload: SmallGroupCreate,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> SmallGroup:
    # The university must sit in the given region.
    authorize_placement(
        authz,
        OrganizationalCoordinate(region_id=payload.region_id, university_id=payload.university_id),
        Operation.CREATE,
        db,
    )
    group = SmallGroup(name=payload.name, university_id=payload.university_id, region_id=payload.region_id)
    db.add(group)
    _commit(db, "Small group already exists")
    db.refresh(group)
    return group


@router.get("/alumni-groups", response_model=list[AlumniGroupOut])
def list_alumni_groups(region_id: int | None = None, db: Session = Depends(get_db)) -> list[AlumniSmallGroup]:
    stmt = select(AlumniSmallGroup).order_by(AlumniSmallGroup.name)
    if region_id is not None:
        stmt = stmt.where(AlumniSmallGroup.region_id == region_id)
    return list(db.scalars(stmt).all())


@router.post("/alumni-groups", response_model=AlumniGroupOut, status_code=status.HTTP_201_CREATED)
def create_alumni_group(payload: AlumniGroupCreate, db: Session = Depends(get_db)) -> AlumniSmallGroup:
    _require_region(db, payload.region_id)
    group = AlumniSmallGroup(name=payload.name, region_id=payload.region_id)
    db.add(group)
    _commit(db, "Alumni small group already exists")
    db.refresh(group)
    return group


def _require_region(db: Session, region_id: int) -> None:
    if get_unscoped(db, Region, region_id) is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Region not found")


def _commit(db: Session, conflict_detail: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail) from exc
