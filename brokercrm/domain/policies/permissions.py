"""Permission policy — role-based access to staff operations."""

from __future__ import annotations

from brokercrm.domain.entities.role import Role
from brokercrm.domain.errors import PermissionDeniedError
from brokercrm.domain.value_objects.enums import Permission


def ensure_permission(role: Role | None, permission: Permission) -> None:
    """Raise PermissionDeniedError unless the role grants *permission*.

    The administrator role is allowed everything.
    """
    if role is None:
        raise PermissionDeniedError("Unauthorized: No role assigned")
    if not role.allows(permission.value):
        raise PermissionDeniedError("Unauthorized: Insufficient permissions")
