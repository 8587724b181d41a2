"""
Scope-based row-level security for the ministry organisation tree.

This package has no dependency on other ministry packages (ministry.db, ministry.security, etc.).
Build a ScopeAssignment for the caller, then ask ScopeAuthorizer for a row filter
(listing) or an AccessDecision (single resource).
"""

from .authorizer import (
    FORBIDDEN_FIELDS,
    ScopeAuthorizer,
    can_access,
    can_reach,
    filter_for,
    validate_coordinate_consistency,
)
from .resolver import MappingResolver, ParentResolver
from .scope import (
    COORDINATE_FIELDS,
    AccessDecision,
    ErrorKind,
    Operation,
    OrganizationalCoordinate,
    RowFilter,
    ScopeAssignment,
    ScopeKind,
)

__all__ = [
    "COORDINATE_FIELDS",
    "FORBIDDEN_FIELDS",
    "AccessDecision",
    "ErrorKind",
    "MappingResolver",
    "Operation",
    "OrganizationalCoordinate",
    "ParentResolver",
    "RowFilter",
    "ScopeAssignment",
    "ScopeAuthorizer",
    "ScopeKind",
    "can_access",
    "can_reach",
    "filter_for",
    "validate_coordinate_consistency",
]
