"""Permission override repository port."""

from typing import Protocol
from uuid import UUID

from garage_rbac.domain.entities import PermissionOverride


class OverrideRepository(Protocol):
    """Port for per-user permission overrides."""

    async def list_by_user(self, user_id: str) -> list[PermissionOverride]: ...

    async def get_for_permission(
        self, user_id: str, permission_id: UUID
    ) -> PermissionOverride | None: ...

    async def upsert(self, override: PermissionOverride) -> PermissionOverride: ...

    async def delete(self, user_id: str, permission_id: UUID) -> None: ...
