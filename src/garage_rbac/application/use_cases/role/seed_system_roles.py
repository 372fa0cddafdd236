"""Seed system roles for a tenant."""

import logging
from datetime import UTC, datetime
from uuid import UUID, uuid4

from garage_rbac.domain.catalog import SYSTEM_ROLE_DEFAULTS
from garage_rbac.domain.entities import Role

logger = logging.getLogger(__name__)


class SeedSystemRolesUseCase:
    """Create admin, customer_service and receptionist for a new tenant.

    Idempotent: roles that already exist are returned untouched.
    """

    def __init__(self, unit_of_work_factory: type) -> None:
        self._uow_factory = unit_of_work_factory

    async def execute(self, tenant_id: UUID, created_by: str | None = None) -> list[Role]:
        roles: list[Role] = []
        async with self._uow_factory() as uow:
            for system_role, (name, default_keys) in SYSTEM_ROLE_DEFAULTS.items():
                existing = await uow.roles.get_by_key(tenant_id, system_role.value)
                if existing:
                    roles.append(existing)
                    continue

                permissions = []
                for key in sorted(default_keys):
                    permission = await uow.permissions.get_by_key(key)
                    if permission and permission.is_active:
                        permissions.append(permission)

                now = datetime.now(UTC)
                role = Role(
                    id=uuid4(),
                    tenant_id=tenant_id,
                    key=system_role.value,
                    name=name,
                    is_system_role=True,
                    is_active=True,
                    permissions=frozenset(p.key for p in permissions),
                    created_by=created_by,
                    created_at=now,
                    updated_at=now,
                )
                await uow.roles.create(role)
                await uow.roles.set_permissions(
                    role.id, [p.id for p in permissions], granted_by=created_by
                )
                logger.info("Seeded system role %s for tenant %s", role.key, tenant_id)
                roles.append(role)
        return roles
