from __future__ import annotations

from dataclasses import dataclass

from ministry.authz import OrganizationalCoordinate, RowFilter, ScopeAssignment


@dataclass(frozen=True)
class AuthzContext:
    """
    Per-request authorization context.

    Built once by the global security dependency; lives on `request.state.authz`
    and on `Session.info["authz"]`, where the scope filter listener reads it.
    """

    user_id: int
    assignment: ScopeAssignment

    # Precomputed from the assignment.
    row_filter: RowFilter
    lineage: OrganizationalCoordinate

    # Scope decision (driven by config / decorators): filter listing queries.
    scope_filter: bool
