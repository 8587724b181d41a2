from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ministry.authz import COORDINATE_FIELDS, Operation, OrganizationalCoordinate
from ministry.db.resolver import get_unscoped
from ministry.db.session import get_db
from ministry.models.activities import PermanentMinistryEvent
from ministry.schemas.events import EventIn, EventOut
from ministry.security.context import AuthzContext
from ministry.security.dependencies import authorize_placement, get_authz, require_access, require_in_scope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.get("", response_model=list[EventOut])
def list_events(
    region_id: int | None = None,
    university_id: int | None = None,
    small_group_id: int | None = None,
    alumni_group_id: int | None = None,
    type: str | None = None,
    db: Session = Depends(get_db),
) -> list[PermanentMinistryEvent]:
    stmt = select(PermanentMinistryEvent).order_by(PermanentMinistryEvent.created_at.desc(), PermanentMinistryEvent.id.desc())
    if region_id is not None:
        stmt = stmt.where(PermanentMinistryEvent.region_id == region_id)
    if university_id is not None:
        stmt = stmt.where(PermanentMinistryEvent.university_id == university_id)
    if small_group_id is not None:
        stmt = stmt.where(PermanentMinistryEvent.small_group_id == small_group_id)
    if alumni_group_id is not None:
        stmt = stmt.where(PermanentMinistryEvent.alumni_group_id == alumni_group_id)
    if type:
        stmt = stmt.where(PermanentMinistryEvent.type == type.lower())
    return list(db.scalars(stmt).all())


@router.get("/{id}", response_model=EventOut)
def get_event(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> PermanentMinistryEvent:
    event = _get_event(db, id)
    require_access(authz, OrganizationalCoordinate.from_object(event), Operation.READ)
    return event


@router.post("", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> PermanentMinistryEvent:
    coordinate = authorize_placement(authz, payload.coordinate(), Operation.CREATE, db)

    event = PermanentMinistryEvent(**payload.model_dump(exclude=set(COORDINATE_FIELDS)), **coordinate.as_dict(include_none=True))
    db.add(event)
    _commit(db)
    db.refresh(event)
    logger.info("Event created id=%s by user_id=%s", event.id, authz.user_id)
    return event


@router.put("/{id}", response_model=EventOut)
def update_event(
    id: int,
    payload: EventIn,
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> PermanentMinistryEvent:
    event = _get_event(db, id)
    require_in_scope(authz, OrganizationalCoordinate.from_object(event), Operation.UPDATE)
    coordinate = authorize_placement(authz, payload.coordinate(), Operation.UPDATE, db)

    for field, value in payload.model_dump(exclude=set(COORDINATE_FIELDS)).items():
        setattr(event, field, value)
    for field, value in coordinate.as_dict(include_none=True).items():
        setattr(event, field, value)
    _commit(db)
    db.refresh(event)
    return event


@router.delete("/{id}")
def delete_event(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> dict[str, str]:
    event = _get_event(db, id)
    require_access(authz, OrganizationalCoordinate.from_object(event), Operation.DELETE)
    db.delete(event)
    _commit(db)
    return {"message": "Event deleted successfully"}


def _get_event(db: Session, id: int) -> PermanentMinistryEvent:
    event = get_unscoped(db, PermanentMinistryEvent, id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


def _commit(db: Session) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Event name already exists") from exc
