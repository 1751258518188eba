import pytest

from projectdesk.auth.permissions import (
    can_approve,
    can_delete,
    can_edit,
    can_view,
    describe_permissions,
    is_admin,
)
from projectdesk.constants import ROLE_NAMES


@pytest.mark.parametrize(
    "role,approve,edit,delete,view",
    [
        ("admin", True, True, True, True),
        ("manager", True, True, True, True),
        ("team_member", False, True, False, True),
        ("viewer", False, False, False, True),
    ],
)
def test_capability_table(role, approve, edit, delete, view):
    assert can_approve(role) is approve
    assert can_edit(role) is edit
    assert can_delete(role) is delete
    assert can_view(role) is view


@pytest.mark.parametrize("role", [None, "", "superuser", "ADMIN", "Manager"])
def test_unknown_roles_get_nothing(role):
    assert not can_approve(role)
    assert not can_edit(role)
    assert not can_delete(role)
    assert not can_view(role)
    assert not is_admin(role)
    assert describe_permissions(role) == []


def test_capability_laws_hold_for_every_role():
    for role in ROLE_NAMES:
        if can_approve(role):
            assert can_edit(role)
        if can_delete(role):
            assert can_approve(role)
        if can_edit(role):
            assert can_view(role)


def test_only_admin_manages_users():
    assert [role for role in ROLE_NAMES if is_admin(role)] == ["admin"]


def test_describe_permissions_labels():
    assert describe_permissions("admin") == ["Manage Users", "Approve", "Delete", "Edit", "View"]
    assert describe_permissions("manager") == ["Approve", "Delete", "Edit", "View"]
    assert describe_permissions("team_member") == ["Edit", "View"]
    assert describe_permissions("viewer") == ["View"]
