"""
Scope authorizer.

Single source of truth for "can this user see/modify/create this resource".

Key ideas:
- A user holds one ScopeAssignment (superadmin > national > region > university
  > smallgroup / alumnismallgroup).
- ``filter_for(scope)`` gives the row filter for listing queries.
- ``can_access(scope, target, op)`` decides a single-resource operation.
- ``can_reach(scope, target)`` is scope membership alone, for ids a resource
  references or already holds rather than ids it is being given.
- ``validate_coordinate_consistency(target, resolver)`` checks that the ids a
  resource is being given agree with each other (a small group's university
  and region, etc.). Parent lookups come from an injected resolver.

Every answer is a pure function of its inputs: no I/O, no state, safe to share
across request threads. Well-formed inputs never raise; a misconfigured
assignment (id-bearing scope without its id) fails closed.

This module has no FastAPI or SQLAlchemy dependency.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from .resolver import ParentResolver
from .scope import (
    AccessDecision,
    ErrorKind,
    Operation,
    OrganizationalCoordinate,
    RowFilter,
    ScopeAssignment,
    ScopeKind,
)

logger = logging.getLogger(__name__)


# ---- Static policy tables ------------------------------------------------------------


# Coordinate fields a scope may never set on a resource, even inside its own unit.
FORBIDDEN_FIELDS: Mapping[ScopeKind, frozenset[str]] = {
    ScopeKind.SUPERADMIN: frozenset(),
    ScopeKind.NATIONAL: frozenset(),
    ScopeKind.REGION: frozenset(),
    ScopeKind.UNIVERSITY: frozenset({"alumni_group_id"}),
    ScopeKind.SMALLGROUP: frozenset({"alumni_group_id"}),
    ScopeKind.ALUMNISMALLGROUP: frozenset({"university_id", "small_group_id"}),
}

# Ancestor fields of each id-bearing scope, nearest first.
_ANCESTOR_FIELDS: Mapping[ScopeKind, tuple[str, ...]] = {
    ScopeKind.REGION: (),
    ScopeKind.UNIVERSITY: ("region_id",),
    ScopeKind.SMALLGROUP: ("university_id", "region_id"),
    ScopeKind.ALUMNISMALLGROUP: ("region_id",),
}


# ---- Authorizer ----------------------------------------------------------------------


class ScopeAuthorizer:
    """
    Stateless policy engine.

    Usage:
        authorizer = ScopeAuthorizer()
        rows = authorizer.filter_for(assignment)
        decision = authorizer.can_access(assignment, coordinate, Operation.UPDATE)
    """

    def __init__(self, forbidden_fields: Mapping[ScopeKind, frozenset[str]] | None = None) -> None:
        self._forbidden = dict(FORBIDDEN_FIELDS if forbidden_fields is None else forbidden_fields)

    @property
    def forbidden_fields(self) -> Mapping[ScopeKind, frozenset[str]]:
        return dict(self._forbidden)

    # ---- Listing -------------------------------------------------------------------

    def filter_for(self, scope: ScopeAssignment) -> RowFilter:
        """
        Row filter for a listing query over resources carrying all four coordinate fields.

        superadmin/national: no restriction. Other kinds: pinned to their own id.
        A missing id denies everything (never "no filter").
        """
        _require_scope(scope)

        if scope.is_unrestricted:
            return RowFilter(criteria={})
        if scope.is_misconfigured:
            logger.warning("Scope %s has no %s; denying all rows", scope.scope.value, scope.scope_field)
            return RowFilter.deny(ErrorKind.MISCONFIGURED_SCOPE)
        return RowFilter(criteria={scope.scope_field: scope.scope_id})

    def filter_for_columns(
        self,
        scope: ScopeAssignment,
        lineage: OrganizationalCoordinate,
        available_fields: Iterable[str],
    ) -> RowFilter:
        """
        Row filter for a table exposing only some coordinate fields (the
        organisation tables themselves: regions, universities, ...).

        ``lineage`` is the scope's coordinate with ancestors resolved, see
        ``scope_lineage``. The scope's own field is used when the table has it;
        a table exposing a forbidden field without the scope's own field is
        out of reach; otherwise the nearest ancestor narrows the rows.
        """
        base = self.filter_for(scope)
        if base.denied is not None or base.allows_all:
            return base

        available = frozenset(available_fields)
        if scope.scope_field in available:
            return base
        if self._forbidden.get(scope.scope, frozenset()) & available:
            return RowFilter.deny(ErrorKind.SCOPE_MISMATCH)

        for field in _ANCESTOR_FIELDS[scope.scope]:
            if field not in available:
                continue
            value = lineage.get(field)
            if value is None:
                return RowFilter.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN)
            return RowFilter(criteria={field: value})

        return RowFilter.deny(ErrorKind.SCOPE_MISMATCH)

    # ---- Single resource -----------------------------------------------------------

    def can_access(
        self,
        scope: ScopeAssignment,
        target: OrganizationalCoordinate,
        op: Operation,
        resolver: ParentResolver | None = None,
    ) -> AccessDecision:
        """
        Decide whether ``scope`` may perform ``op`` on a resource at ``target``.

        Order of checks:
        1. Misconfigured scope -> misconfigured_scope.
        2. create/update: forbidden target fields -> forbidden_field_assignment.
        3. create/update with a resolver: chain consistency ->
           inconsistent_coordinate_chain; the target is then completed with
           resolved parent ids it left empty.
        4. superadmin/national -> allowed; otherwise the target's field must
           equal the scope id, else scope_mismatch.
        """
        _require_scope(scope)
        op = Operation(op)

        if scope.is_misconfigured:
            return self._denied(scope, op, ErrorKind.MISCONFIGURED_SCOPE, f"{scope.scope.value} scope has no {scope.scope_field}")

        if op.assigns_coordinates:
            forbidden = sorted(f for f in self._forbidden.get(scope.scope, frozenset()) if target.get(f) is not None)
            if forbidden:
                return self._denied(
                    scope,
                    op,
                    ErrorKind.FORBIDDEN_FIELD_ASSIGNMENT,
                    f"{scope.scope.value} scope cannot assign {', '.join(forbidden)}",
                )

            if resolver is not None:
                chain = self.validate_coordinate_consistency(target, resolver)
                if not chain.allowed:
                    return self._denied(scope, op, ErrorKind.INCONSISTENT_COORDINATE_CHAIN, chain.message)
                target = self.complete_coordinate(target, resolver)

        return self._match(scope, target, op)

    def can_reach(
        self,
        scope: ScopeAssignment,
        target: OrganizationalCoordinate,
        op: Operation = Operation.READ,
    ) -> AccessDecision:
        """
        Decide whether ``target`` lies inside ``scope``, without the
        forbidden-field stage.

        For coordinates that are referenced or already stored rather than
        assigned: the member a contribution is recorded for, the current
        placement of a row being updated. ``op`` only labels the decision.
        """
        _require_scope(scope)
        op = Operation(op)

        if scope.is_misconfigured:
            return self._denied(scope, op, ErrorKind.MISCONFIGURED_SCOPE, f"{scope.scope.value} scope has no {scope.scope_field}")
        return self._match(scope, target, op)

    def _match(self, scope: ScopeAssignment, target: OrganizationalCoordinate, op: Operation) -> AccessDecision:
        row_filter = self.filter_for(scope)
        if row_filter.matches(target):
            logger.debug("Scope allowed scope=%s op=%s target=%s", scope.scope.value, op.value, target.as_dict())
            return AccessDecision.allow(row_filter.criteria)

        return self._denied(
            scope,
            op,
            ErrorKind.SCOPE_MISMATCH,
            f"{scope.scope_field} does not match your {scope.scope.value} scope",
        )

    # ---- Coordinate chains ---------------------------------------------------------

    def validate_coordinate_consistency(
        self,
        target: OrganizationalCoordinate,
        resolver: ParentResolver,
    ) -> AccessDecision:
        """
        Check the target's ids agree with each other per the resolver.

        Unknown ids count as inconsistent. Empty fields are not checked.
        """
        if target.university_id is not None:
            region_id = resolver.university_region(target.university_id)
            if region_id is None:
                return AccessDecision.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN, "unknown university")
            if target.region_id is not None and target.region_id != region_id:
                return AccessDecision.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN, "university is not in region")

        if target.small_group_id is not None:
            parents = resolver.small_group_parents(target.small_group_id)
            if parents is None:
                return AccessDecision.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN, "unknown small group")
            university_id, region_id = parents
            if target.university_id is not None and target.university_id != university_id:
                return AccessDecision.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN, "small group is not in university")
            if target.region_id is not None and target.region_id != region_id:
                return AccessDecision.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN, "small group is not in region")

        if target.alumni_group_id is not None:
            region_id = resolver.alumni_group_region(target.alumni_group_id)
            if region_id is None:
                return AccessDecision.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN, "unknown alumni group")
            if target.region_id is not None and target.region_id != region_id:
                return AccessDecision.deny(ErrorKind.INCONSISTENT_COORDINATE_CHAIN, "alumni group is not in region")

        return AccessDecision.allow()

    def complete_coordinate(
        self,
        target: OrganizationalCoordinate,
        resolver: ParentResolver,
    ) -> OrganizationalCoordinate:
        """Fill empty parent ids from the resolver. Ids already set are never replaced."""
        values = target.as_dict(include_none=True)

        if target.small_group_id is not None:
            parents = resolver.small_group_parents(target.small_group_id)
            if parents is not None:
                if values["university_id"] is None:
                    values["university_id"] = parents[0]
                if values["region_id"] is None:
                    values["region_id"] = parents[1]

        if values["university_id"] is not None and values["region_id"] is None:
            values["region_id"] = resolver.university_region(values["university_id"])

        if target.alumni_group_id is not None and values["region_id"] is None:
            values["region_id"] = resolver.alumni_group_region(target.alumni_group_id)

        return OrganizationalCoordinate(**values)

    def scope_lineage(self, scope: ScopeAssignment, resolver: ParentResolver) -> OrganizationalCoordinate:
        """The scope's own coordinate with its ancestors resolved (university 4 -> region 100)."""
        _require_scope(scope)
        if scope.is_unrestricted or scope.is_misconfigured:
            return scope.coordinate()
        return self.complete_coordinate(scope.coordinate(), resolver)

    # ---- Helpers -------------------------------------------------------------------

    def _denied(self, scope: ScopeAssignment, op: Operation, reason: ErrorKind, message: str | None) -> AccessDecision:
        logger.debug(
            "Scope denied scope=%s scope_id=%s op=%s reason=%s",
            scope.scope.value,
            scope.scope_id,
            op.value,
            reason.value,
        )
        return AccessDecision.deny(reason, message)


def _require_scope(scope: ScopeAssignment | None) -> None:
    if scope is None:
        raise ValueError("scope assignment is required")


_default = ScopeAuthorizer()


def filter_for(scope: ScopeAssignment) -> RowFilter:
    return _default.filter_for(scope)


def can_access(
    scope: ScopeAssignment,
    target: OrganizationalCoordinate,
    op: Operation,
    resolver: ParentResolver | None = None,
) -> AccessDecision:
    return _default.can_access(scope, target, op, resolver)


def validate_coordinate_consistency(target: OrganizationalCoordinate, resolver: ParentResolver) -> AccessDecision:
    return _default.validate_coordinate_consistency(target, resolver)


def can_reach(scope: ScopeAssignment, target: OrganizationalCoordinate, op: Operation = Operation.READ) -> AccessDecision:
    return _default.can_reach(scope, target, op)
