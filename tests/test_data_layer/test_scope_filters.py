"""
Tests for the do_orm_execute scope filter listener.

Uses seeded_session: the demo tree from ministry.db.init_db, rolled back after
each test.
"""
from __future__ import annotations

from sqlalchemy import select

import ministry.db.filters  # noqa: F401  (register the listener)
from ministry.authz import ScopeAssignment, ScopeAuthorizer
from ministry.db.resolver import UNSCOPED, SqlParentResolver, get_unscoped
from ministry.models import (
    AlumniSmallGroup,
    Attendance,
    Contribution,
    Member,
    PermanentMinistryEvent,
    Region,
    SmallGroup,
    University,
)
from ministry.security.context import AuthzContext

authorizer = ScopeAuthorizer()


def _scope(db, scope: ScopeAssignment, scope_filter: bool = True) -> None:
    db.info["authz"] = AuthzContext(
        user_id=0,
        assignment=scope,
        row_filter=authorizer.filter_for(scope),
        lineage=authorizer.scope_lineage(scope, SqlParentResolver(db)),
        scope_filter=scope_filter,
    )


def _ids(db, model) -> list[int]:
    return sorted(row.id for row in db.scalars(select(model)).all())


def test_no_authz_means_no_filter(seeded_session):
    assert _ids(seeded_session, Member) == [1, 2, 3, 4, 5]


def test_national_sees_everything(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="national"))
    assert _ids(seeded_session, Member) == [1, 2, 3, 4, 5]
    assert len(_ids(seeded_session, Contribution)) == 3


def test_region_scope(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="region", region_id=1))
    assert _ids(seeded_session, Member) == [1, 2, 4, 5]
    assert _ids(seeded_session, PermanentMinistryEvent) == [2, 3]
    assert _ids(seeded_session, Region) == [1]
    assert _ids(seeded_session, University) == [1, 2]
    assert _ids(seeded_session, AlumniSmallGroup) == [1]


def test_university_scope(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="university", university_id=1))
    assert _ids(seeded_session, Member) == [1, 5]
    assert _ids(seeded_session, Region) == [1]
    assert _ids(seeded_session, University) == [1]
    assert _ids(seeded_session, SmallGroup) == [1]
    assert _ids(seeded_session, AlumniSmallGroup) == []


def test_alumni_scope(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="alumnismallgroup", alumni_group_id=1))
    assert _ids(seeded_session, Member) == [4]
    assert _ids(seeded_session, University) == []
    assert _ids(seeded_session, AlumniSmallGroup) == [1]


def test_attendance_and_contributions_follow_the_member(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="smallgroup", small_group_id=1))
    attendance = seeded_session.scalars(select(Attendance)).all()
    assert [a.member_id for a in attendance] == [1]

    contributions = seeded_session.scalars(select(Contribution)).all()
    # The contribution without a member is invisible to scoped users.
    assert [c.member_id for c in contributions] == [1]


def test_misconfigured_scope_sees_nothing(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="region"))
    assert _ids(seeded_session, Member) == []
    assert _ids(seeded_session, Region) == []
    assert _ids(seeded_session, Contribution) == []


def test_extra_where_clause_only_narrows(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="university", university_id=1))
    rows = seeded_session.scalars(select(Member).where(Member.region_id == 2)).all()
    assert rows == []


def test_scope_filter_off_for_route(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="smallgroup", small_group_id=1), scope_filter=False)
    assert _ids(seeded_session, Member) == [1, 2, 3, 4, 5]


def test_unscoped_statements_bypass_the_filter(seeded_session):
    _scope(seeded_session, ScopeAssignment(scope="smallgroup", small_group_id=1))
    rows = seeded_session.scalars(select(Member).execution_options(**UNSCOPED)).all()
    assert len(rows) == 5
    assert get_unscoped(seeded_session, Member, 3).first_name == "Amina"
