"""Permission catalog repository port."""

from typing import Protocol
from uuid import UUID

from garage_rbac.domain.entities import Permission
from garage_rbac.domain.value_objects import PermissionCategory


class PermissionRepository(Protocol):
    """Port for the permission catalog."""

    async def get_by_id(self, permission_id: UUID) -> Permission | None: ...

    async def get_by_key(self, key: str) -> Permission | None: ...

    async def list_active(
        self, category: PermissionCategory | None = None
    ) -> list[Permission]: ...
