"""Tests for the scope/id rules of a role assignment payload."""

import pytest
from pydantic import ValidationError

from ministry.authz import ScopeAssignment, ScopeKind
from ministry.schemas.security import UserRoleIn


@pytest.mark.parametrize(
    "payload",
    [
        {"user_id": 1, "scope": "superadmin"},
        {"user_id": 1, "scope": "national"},
        {"user_id": 1, "scope": "region", "region_id": 2},
        {"user_id": 1, "scope": "university", "university_id": 3},
        {"user_id": 1, "scope": "smallgroup", "small_group_id": 4},
        {"user_id": 1, "scope": "alumnismallgroup", "alumni_group_id": 5},
    ],
)
def test_valid_assignments(payload):
    role = UserRoleIn.model_validate(payload)
    assert not role.assignment().is_misconfigured


def test_missing_matching_id_is_rejected():
    with pytest.raises(ValidationError, match="university_id is required"):
        UserRoleIn.model_validate({"user_id": 1, "scope": "university"})


def test_extra_ids_are_rejected():
    with pytest.raises(ValidationError, match="cannot carry"):
        UserRoleIn.model_validate({"user_id": 1, "scope": "smallgroup", "small_group_id": 4, "region_id": 1})


def test_national_cannot_carry_ids():
    with pytest.raises(ValidationError):
        UserRoleIn.model_validate({"user_id": 1, "scope": "national", "region_id": 1})


def test_unknown_scope_is_rejected():
    with pytest.raises(ValidationError):
        UserRoleIn.model_validate({"user_id": 1, "scope": "department"})


def test_assignment():
    role = UserRoleIn.model_validate({"user_id": 1, "scope": "region", "region_id": 2})
    assert role.assignment() == ScopeAssignment(scope=ScopeKind.REGION, region_id=2)
