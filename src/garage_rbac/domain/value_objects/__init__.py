"""Domain value objects."""

from garage_rbac.domain.value_objects.auth_context import AuthContext
from garage_rbac.domain.value_objects.permission_category import (
    CATEGORY_ORDER,
    PermissionCategory,
)
from garage_rbac.domain.value_objects.permission_key import (
    EDIT_ACTIONS,
    Action,
    PermissionKey,
    Resource,
)
from garage_rbac.domain.value_objects.system_role import SUPER_ROLE_KEY, SystemRole

__all__ = [
    "CATEGORY_ORDER",
    "EDIT_ACTIONS",
    "SUPER_ROLE_KEY",
    "Action",
    "AuthContext",
    "PermissionCategory",
    "PermissionKey",
    "Resource",
    "SystemRole",
]
