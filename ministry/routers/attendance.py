from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ministry.authz import Operation, OrganizationalCoordinate
from ministry.db.resolver import UNSCOPED, get_unscoped
from ministry.db.session import get_db
from ministry.models.activities import Attendance, PermanentMinistryEvent
from ministry.models.people import Member
from ministry.schemas.attendance import AttendanceBulkOut, AttendanceIn, AttendanceOut, AttendanceResult
from ministry.security.context import AuthzContext
from ministry.security.decorators import scope_filtered
from ministry.security.dependencies import authorizer, get_authz, require_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.get("", response_model=list[AttendanceOut])
@scope_filtered()
def list_attendance(
    event_id: int | None = None,
    attendance_status: str | None = Query(default=None, alias="status"),
    date_from: date | None = None,
    date_to: date | None = None,
    region_id: int | None = None,
    university_id: int | None = None,
    small_group_id: int | None = None,
    alumni_group_id: int | None = None,
    db: Session = Depends(get_db),
) -> list[Attendance]:
    # Scoped through the member (ministry/db/filters.py); the filters below only narrow it.
    stmt = select(Attendance).order_by(Attendance.recorded_at.desc(), Attendance.id.desc())
    if event_id is not None:
        stmt = stmt.where(Attendance.event_id == event_id)
    if attendance_status:
        stmt = stmt.where(Attendance.status == attendance_status.lower())
    # Whole days, both ends inclusive.
    if date_from is not None:
        stmt = stmt.where(Attendance.recorded_at >= datetime.combine(date_from, time.min))
    if date_to is not None:
        stmt = stmt.where(Attendance.recorded_at < datetime.combine(date_to + timedelta(days=1), time.min))

    member_filters = [
        getattr(Member, field) == value
        for field, value in (
            ("region_id", region_id),
            ("university_id", university_id),
            ("small_group_id", small_group_id),
            ("alumni_group_id", alumni_group_id),
        )
        if value is not None
    ]
    if member_filters:
        stmt = stmt.where(Attendance.member_id.in_(select(Member.id).where(*member_filters)))
    return list(db.scalars(stmt).all())


@router.get("/{id}", response_model=AttendanceOut)
def get_attendance(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> Attendance:
    record = _get_record(db, id)
    require_access(authz, OrganizationalCoordinate.from_object(record.member), Operation.READ)
    return record


@router.post("", response_model=AttendanceBulkOut, status_code=status.HTTP_201_CREATED)
def record_attendance(
    records: list[dict[str, Any]] = Body(...),
    db: Session = Depends(get_db),
    authz: AuthzContext = Depends(get_authz),
) -> AttendanceBulkOut:
    """
    Bulk create. Each record succeeds or fails on its own; the response lists
    one result per input record, in order.
    """

    results: list[AttendanceResult] = []
    created: list[Attendance] = []
    seen: set[tuple[int, int]] = set()

    for raw in records:
        try:
            data = AttendanceIn.model_validate(raw)
        except ValidationError as exc:
            results.append(AttendanceResult(success=False, error=exc.errors(include_url=False, include_context=False), input=raw))
            continue

        error = _check_record(db, authz, data, seen)
        if error is not None:
            results.append(AttendanceResult(success=False, error=error, input=raw))
            continue

        record = Attendance(**data.model_dump())
        db.add(record)
        created.append(record)
        seen.add((data.member_id, data.event_id))
        results.append(AttendanceResult(success=True))

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Attendance already recorded") from exc

    created_iter = iter(created)
    for result in results:
        if result.success:
            result.data = AttendanceOut.model_validate(next(created_iter))

    logger.info("Attendance recorded created=%s rejected=%s by user_id=%s", len(created), len(results) - len(created), authz.user_id)
    return AttendanceBulkOut(results=results)


@router.delete("/{id}")
def delete_attendance(id: int, db: Session = Depends(get_db), authz: AuthzContext = Depends(get_authz)) -> dict[str, str]:
    record = _get_record(db, id)
    require_access(authz, OrganizationalCoordinate.from_object(record.member), Operation.DELETE)
    db.delete(record)
    db.commit()
    return {"message": "Attendance record deleted successfully"}


def _check_record(
    db: Session,
    authz: AuthzContext,
    data: AttendanceIn,
    seen: set[tuple[int, int]],
) -> dict[str, Any] | str | None:
    member = get_unscoped(db, Member, data.member_id)
    event = get_unscoped(db, PermanentMinistryEvent, data.event_id)
    if member is None or event is None:
        return "The specified member or event does not exist."

    # The member and event are referenced, not placed: scope membership only.
    for target, op in (
        (OrganizationalCoordinate.from_object(member), Operation.CREATE),
        (OrganizationalCoordinate.from_object(event), Operation.READ),
    ):
        decision = authorizer.can_reach(authz.assignment, target, op)
        if not decision.allowed:
            return {"error": "Access denied", "reason": decision.reason.value, "message": decision.message}

    key = (data.member_id, data.event_id)
    duplicate = db.execute(
        select(Attendance.id)
        .where(Attendance.member_id == data.member_id, Attendance.event_id == data.event_id)
        .execution_options(**UNSCOPED)
    ).first()
    if key in seen or duplicate is not None:
        return "Attendance already recorded for this member and event."
    return None


def _get_record(db: Session, id: int) -> Attendance:
    record = get_unscoped(db, Attendance, id)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Attendance record not found")
    return record
