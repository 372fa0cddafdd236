"""Lookups shared by the administration use cases."""

from uuid import UUID

from garage_rbac.application.ports import UnitOfWork
from garage_rbac.domain.entities import Role
from garage_rbac.domain.exceptions import NotFoundError, ValidationError
from garage_rbac.domain.value_objects import AuthContext, PermissionKey


def require_tenant(actor: AuthContext) -> UUID:
    """Tenant of the acting user; administration is always tenant-scoped."""
    if actor.tenant_id is None:
        raise ValidationError(f"User {actor.user_id} is not assigned to a tenant")
    return actor.tenant_id


def require_user_id(user_id: str | None) -> str:
    if not user_id or not user_id.strip():
        raise ValidationError("user_id is required")
    return user_id.strip()


async def get_tenant_role(uow: UnitOfWork, actor: AuthContext, role_id: UUID) -> Role:
    """Role by id, visible only within the actor's tenant."""
    tenant_id = require_tenant(actor)
    role = await uow.roles.get_by_id(role_id)
    if not role or role.tenant_id != tenant_id:
        raise NotFoundError("Role", role_id)
    return role


async def load_permission_keys(
    uow: UnitOfWork, permission_ids: list[UUID]
) -> dict[UUID, PermissionKey]:
    """Map ids to keys, rejecting ids without an active catalog entry."""
    keys: dict[UUID, PermissionKey] = {}
    for permission_id in dict.fromkeys(permission_ids):
        permission = await uow.permissions.get_by_id(permission_id)
        if not permission or not permission.is_active:
            raise ValidationError(f"Unknown permission: {permission_id}")
        keys[permission_id] = permission.key
    return keys


async def require_same_tenant(uow: UnitOfWork, actor: AuthContext, user_id: str) -> None:
    """Reject users whose roles place them in another tenant.

    Users without any active role have no tenant yet and pass.
    """
    tenant_id = require_tenant(actor)
    for role in await uow.user_roles.list_roles_for_user(user_id):
        if role.tenant_id != tenant_id:
            raise NotFoundError("User", user_id)
