from __future__ import annotations

from sqlalchemy import and_, event, false, select, true
from sqlalchemy.orm import Session, with_loader_criteria

from ministry.authz import RowFilter, ScopeAuthorizer

_authorizer = ScopeAuthorizer()


@event.listens_for(Session, "do_orm_execute")
def _apply_scope_filters(execute_state) -> None:
    """
    Transparent scope filtering for listing queries.

    Route code keeps writing plain queries:
        db.scalars(select(Member)).all()
    and gets only the rows the caller's scope may see. A misconfigured scope
    yields no rows, never all rows.

    Opt out per statement with `.execution_options(skip_scope_filter=True)`
    (single-resource loads that are then checked with `can_access`).
    """

    if not execute_state.is_select or execute_state.is_relationship_load:
        return
    if execute_state.execution_options.get("skip_scope_filter", False):
        return

    authz = execute_state.session.info.get("authz")
    if authz is None or not authz.scope_filter or authz.row_filter.allows_all:
        return

    # Local import to avoid cycles.
    from ministry.models import (  # noqa: WPS433 (local import)
        AlumniSmallGroup,
        Attendance,
        Contribution,
        Member,
        PermanentMinistryEvent,
        Region,
        SmallGroup,
        University,
    )

    row_filter = authz.row_filter
    visible_members = select(Member.id).where(_criteria(Member, row_filter))

    options = [
        with_loader_criteria(Member, _criteria(Member, row_filter), include_aliases=True),
        with_loader_criteria(PermanentMinistryEvent, _criteria(PermanentMinistryEvent, row_filter), include_aliases=True),
        # Attendance and contributions live wherever their member lives.
        with_loader_criteria(Attendance, Attendance.member_id.in_(visible_members), include_aliases=True),
        with_loader_criteria(Contribution, Contribution.member_id.in_(visible_members), include_aliases=True),
    ]

    for model in (Region, University, SmallGroup, AlumniSmallGroup):
        table_filter = _authorizer.filter_for_columns(authz.assignment, authz.lineage, model.__coordinate_columns__)
        options.append(with_loader_criteria(model, _criteria(model, table_filter), include_aliases=True))

    execute_state.statement = execute_state.statement.options(*options)


def _criteria(model, row_filter: RowFilter):
    if row_filter.denied is not None:
        return false()
    columns = model.__coordinate_columns__
    clauses = [getattr(model, columns[field]) == value for field, value in row_filter.criteria.items()]
    return and_(*clauses) if clauses else true()
