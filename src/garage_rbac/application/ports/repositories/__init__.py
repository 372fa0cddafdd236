"""Repository ports."""

from garage_rbac.application.ports.repositories.override_repository import (
    OverrideRepository,
)
from garage_rbac.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from garage_rbac.application.ports.repositories.role_repository import RoleRepository
from garage_rbac.application.ports.repositories.user_role_repository import (
    UserRoleRepository,
)

__all__ = [
    "OverrideRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRoleRepository",
]
