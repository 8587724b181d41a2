from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, model_validator

from ministry.authz import ScopeAssignment, ScopeKind
from ministry.schemas.common import CoordinateFields


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    is_active: bool


class UserRoleIn(CoordinateFields):
    """
    Assign a scope to a user.

    The id matching `scope` is required and the other ids must be empty;
    superadmin and national carry no ids.
    """

    user_id: int
    scope: ScopeKind

    @model_validator(mode="after")
    def _check_scope_ids(self) -> UserRoleIn:
        assignment = self.assignment()
        if assignment.is_misconfigured:
            raise ValueError(f"{assignment.scope_field} is required for {self.scope.value} scope")
        extra = [name for name, value in self.coordinate().as_dict().items() if name != assignment.scope_field]
        if extra:
            raise ValueError(f"{self.scope.value} scope cannot carry {', '.join(sorted(extra))}")
        return self

    def assignment(self) -> ScopeAssignment:
        return ScopeAssignment(scope=self.scope, **self.coordinate().as_dict(include_none=True))


class UserRoleOut(CoordinateFields):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    scope: ScopeKind
    assigned_at: datetime


class OrgRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CurrentScopeOut(BaseModel):
    scope: ScopeKind
    region: OrgRef | None = None
    university: OrgRef | None = None
    small_group: OrgRef | None = None
    alumni_group: OrgRef | None = None
