"""Role to capability mapping.

Every check is a total function over the closed role set; an unknown or
missing role gets no capability.
"""
from typing import Callable, List, Optional

from fastapi import Depends, HTTPException, status

from .jwt import Identity, get_current_user

APPROVER_ROLES = frozenset({"admin", "manager"})
EDITOR_ROLES = frozenset({"admin", "manager", "team_member"})
DELETER_ROLES = frozenset({"admin", "manager"})
VIEWER_ROLES = frozenset({"admin", "manager", "team_member", "viewer"})
ADMIN_ROLE = "admin"


def can_approve(role: Optional[str]) -> bool:
    return role in APPROVER_ROLES


def can_edit(role: Optional[str]) -> bool:
    return role in EDITOR_ROLES


def can_delete(role: Optional[str]) -> bool:
    return role in DELETER_ROLES


def can_view(role: Optional[str]) -> bool:
    return role in VIEWER_ROLES


def is_admin(role: Optional[str]) -> bool:
    return role == ADMIN_ROLE


_CAPABILITY_LABELS = (
    ("Manage Users", is_admin),
    ("Approve", can_approve),
    ("Delete", can_delete),
    ("Edit", can_edit),
    ("View", can_view),
)


def describe_permissions(role: Optional[str]) -> List[str]:
    return [label for label, check in _CAPABILITY_LABELS if check(role)]


def require_capability(check: Callable[[Optional[str]], bool], detail: str = "Insufficient permissions"):
    def capability_checker(identity: Identity = Depends(get_current_user)) -> Identity:
        if check(identity.role):
            return identity
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

    return capability_checker
