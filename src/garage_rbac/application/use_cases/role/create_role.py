"""Create role use case."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from garage_rbac.application.dto.role_dto import RoleCreateInput
from garage_rbac.application.use_cases.lookup import load_permission_keys, require_tenant
from garage_rbac.domain.entities import Role
from garage_rbac.domain.exceptions import ConflictError, ValidationError
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext, SystemRole

logger = logging.getLogger(__name__)


class CreateRoleUseCase:
    """Create a custom role with an initial permission set."""

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, actor: AuthContext, data: RoleCreateInput) -> Role:
        """Create role in actor's tenant. Role key must be unique per tenant."""
        require_permission(actor, "roles.create")
        tenant_id = require_tenant(actor)

        key = (data.key or "").strip()
        name = (data.name or "").strip()
        if not key:
            raise ValidationError("Role key is required")
        if not name:
            raise ValidationError("Role name is required")
        if key in {r.value for r in SystemRole}:
            raise ConflictError(f"Role key is reserved for system roles: {key}")

        async with self._uow_factory() as uow:
            if await uow.roles.get_by_key(tenant_id, key):
                raise ConflictError(f"Role key already exists: {key}")

            keys = await load_permission_keys(uow, data.permission_ids)
            now = datetime.now(UTC)
            role = Role(
                id=uuid4(),
                tenant_id=tenant_id,
                key=key,
                name=name,
                description=data.description,
                is_system_role=False,
                is_active=True,
                permissions=frozenset(keys.values()),
                created_by=actor.user_id,
                created_at=now,
                updated_at=now,
            )
            await uow.roles.create(role)
            await uow.roles.set_permissions(role.id, list(keys), granted_by=actor.user_id)

        logger.info("Role %s created in tenant %s by %s", key, tenant_id, actor.user_id)
        return role
