"""Value types shared by the scope authorizer and its callers."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Mapping

COORDINATE_FIELDS: tuple[str, ...] = ("region_id", "university_id", "small_group_id", "alumni_group_id")


class ScopeKind(str, Enum):
    SUPERADMIN = "superadmin"
    NATIONAL = "national"
    REGION = "region"
    UNIVERSITY = "university"
    SMALLGROUP = "smallgroup"
    ALUMNISMALLGROUP = "alumnismallgroup"


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def assigns_coordinates(self) -> bool:
        return self in (Operation.CREATE, Operation.UPDATE)


class ErrorKind(str, Enum):
    """Machine-readable denial reasons. Values are sent to clients as-is."""

    UNAUTHENTICATED = "unauthenticated"
    MISCONFIGURED_SCOPE = "misconfigured_scope"
    SCOPE_MISMATCH = "scope_mismatch"
    FORBIDDEN_FIELD_ASSIGNMENT = "forbidden_field_assignment"
    INCONSISTENT_COORDINATE_CHAIN = "inconsistent_coordinate_chain"


# Scope kinds that see everything, and the coordinate field each other kind is pinned to.
UNRESTRICTED_SCOPES = frozenset({ScopeKind.SUPERADMIN, ScopeKind.NATIONAL})

SCOPE_FIELD: Mapping[ScopeKind, str] = {
    ScopeKind.REGION: "region_id",
    ScopeKind.UNIVERSITY: "university_id",
    ScopeKind.SMALLGROUP: "small_group_id",
    ScopeKind.ALUMNISMALLGROUP: "alumni_group_id",
}


@dataclass(frozen=True)
class OrganizationalCoordinate:
    """Where a resource lives in the organisation tree."""

    region_id: int | None = None
    university_id: int | None = None
    small_group_id: int | None = None
    alumni_group_id: int | None = None

    def get(self, field: str) -> int | None:
        if field not in COORDINATE_FIELDS:
            raise KeyError(field)
        return getattr(self, field)

    def with_values(self, **values: int | None) -> OrganizationalCoordinate:
        return replace(self, **values)

    def as_dict(self, *, include_none: bool = False) -> dict[str, int | None]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        if include_none:
            return out
        return {k: v for k, v in out.items() if v is not None}

    @classmethod
    def from_object(cls, obj: Any) -> OrganizationalCoordinate:
        """Read the four coordinate attributes of an ORM row (or any object); missing ones are None."""
        return cls(**{name: getattr(obj, name, None) for name in COORDINATE_FIELDS})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> OrganizationalCoordinate:
        return cls(**{name: data.get(name) for name in COORDINATE_FIELDS})


@dataclass(frozen=True)
class ScopeAssignment:
    """
    A user's access grant.

    Exactly one id is expected, matching ``scope``; superadmin and national carry none.
    The assignment is read-only at authorization time.
    """

    scope: ScopeKind
    region_id: int | None = None
    university_id: int | None = None
    small_group_id: int | None = None
    alumni_group_id: int | None = None

    def __post_init__(self) -> None:
        # Accept plain strings ("region") as well as ScopeKind members.
        object.__setattr__(self, "scope", ScopeKind(self.scope))

    @property
    def is_unrestricted(self) -> bool:
        return self.scope in UNRESTRICTED_SCOPES

    @property
    def scope_field(self) -> str | None:
        return SCOPE_FIELD.get(self.scope)

    @property
    def scope_id(self) -> int | None:
        field = self.scope_field
        return getattr(self, field) if field else None

    @property
    def is_misconfigured(self) -> bool:
        return not self.is_unrestricted and self.scope_id is None

    def coordinate(self) -> OrganizationalCoordinate:
        """The scope's own coordinate (only the ids it carries)."""
        return OrganizationalCoordinate(
            region_id=self.region_id,
            university_id=self.university_id,
            small_group_id=self.small_group_id,
            alumni_group_id=self.alumni_group_id,
        )

    @classmethod
    def from_object(cls, obj: Any) -> ScopeAssignment:
        """Build from a ``user_roles`` row (or any object with ``scope`` and the id attributes)."""
        return cls(
            scope=ScopeKind(obj.scope),
            **{name: getattr(obj, name, None) for name in COORDINATE_FIELDS},
        )


@dataclass(frozen=True)
class RowFilter:
    """
    Result of ``filter_for``: the criteria to intersect with a listing query.

    ``denied`` is set when the filter must match nothing. An empty, non-denied
    filter matches every row.
    """

    criteria: Mapping[str, int]
    denied: ErrorKind | None = None

    @property
    def allows_all(self) -> bool:
        return self.denied is None and not self.criteria

    def matches(self, coordinate: OrganizationalCoordinate) -> bool:
        if self.denied is not None:
            return False
        return all(coordinate.get(field) == value for field, value in self.criteria.items())

    @classmethod
    def deny(cls, reason: ErrorKind) -> RowFilter:
        return cls(criteria={}, denied=reason)


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: ErrorKind | None = None
    row_filter: Mapping[str, int] | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value if self.reason else None,
            "row_filter": dict(self.row_filter) if self.row_filter is not None else None,
            "message": self.message,
        }

    @classmethod
    def allow(cls, row_filter: Mapping[str, int] | None = None) -> AccessDecision:
        return cls(allowed=True, row_filter=dict(row_filter or {}))

    @classmethod
    def deny(cls, reason: ErrorKind, message: str | None = None) -> AccessDecision:
        return cls(allowed=False, reason=reason, message=message)
