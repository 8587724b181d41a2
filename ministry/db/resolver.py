from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from ministry.models.org import AlumniSmallGroup, SmallGroup, University

# Parent lookups must see the whole tree, whatever the caller's scope.
UNSCOPED = {"skip_scope_filter": True}


class SqlParentResolver:
    """`ParentResolver` backed by the organisation tables."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def university_region(self, university_id: int) -> int | None:
        stmt = select(University.region_id).where(University.id == university_id).execution_options(**UNSCOPED)
        return self._db.execute(stmt).scalar_one_or_none()

    def small_group_parents(self, small_group_id: int) -> tuple[int, int] | None:
        stmt = (
            select(SmallGroup.university_id, SmallGroup.region_id)
            .where(SmallGroup.id == small_group_id)
            .execution_options(**UNSCOPED)
        )
        row = self._db.execute(stmt).first()
        if row is None:
            return None
        return row.university_id, row.region_id

    def alumni_group_region(self, alumni_group_id: int) -> int | None:
        stmt = (
            select(AlumniSmallGroup.region_id)
            .where(AlumniSmallGroup.id == alumni_group_id)
            .execution_options(**UNSCOPED)
        )
        return self._db.execute(stmt).scalar_one_or_none()


def get_unscoped(db: Session, model, id: int):
    """
    Load one row by primary key, bypassing the scope filter.

    Single-resource endpoints use this and then call `can_access`, so an
    out-of-scope row is a 403 rather than a misleading 404.
    """
    return db.scalars(select(model).where(model.id == id).execution_options(**UNSCOPED)).first()
