"""Pure domain services - permission resolution and authorization checks."""

from garage_rbac.domain.services.authorization_guard import (
    can,
    can_all,
    can_any,
    require_permission,
)
from garage_rbac.domain.services.permission_resolver import (
    PermissionSource,
    Resolution,
    explain_permissions,
    resolve,
    resolve_effective_permissions,
)

__all__ = [
    "PermissionSource",
    "Resolution",
    "can",
    "can_all",
    "can_any",
    "explain_permissions",
    "require_permission",
    "resolve",
    "resolve_effective_permissions",
]
