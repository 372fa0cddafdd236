"""Role repository port."""

from typing import Protocol
from uuid import UUID

from garage_rbac.domain.entities import Role


class RoleRepository(Protocol):
    """Port for role persistence. Roles carry their resolved permission keys."""

    async def get_by_id(self, role_id: UUID) -> Role | None: ...

    async def get_by_key(self, tenant_id: UUID, key: str) -> Role | None: ...

    async def list_by_tenant(self, tenant_id: UUID) -> list[Role]: ...

    async def create(self, role: Role) -> Role: ...

    async def update(self, role: Role) -> None: ...

    async def set_permissions(
        self, role_id: UUID, permission_ids: list[UUID], granted_by: str | None = None
    ) -> None: ...

    async def delete(self, role_id: UUID) -> None: ...
