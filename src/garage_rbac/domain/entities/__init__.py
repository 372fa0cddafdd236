"""Domain entities."""

from garage_rbac.domain.entities.permission import Permission
from garage_rbac.domain.entities.permission_override import PermissionOverride
from garage_rbac.domain.entities.role import Role
from garage_rbac.domain.entities.user_role import UserRoleAssignment

__all__ = [
    "Permission",
    "PermissionOverride",
    "Role",
    "UserRoleAssignment",
]
