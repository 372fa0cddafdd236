"""User-role assignment repository port."""

from typing import Protocol
from uuid import UUID

from garage_rbac.domain.entities import Role, UserRoleAssignment


class UserRoleRepository(Protocol):
    """Port for user-role assignments."""

    async def list_roles_for_user(self, user_id: str) -> list[Role]: ...

    async def get(self, user_id: str, role_id: UUID) -> UserRoleAssignment | None: ...

    async def list_user_ids_for_role(self, role_id: UUID) -> list[str]: ...

    async def create(self, assignment: UserRoleAssignment) -> UserRoleAssignment: ...

    async def delete(self, user_id: str, role_id: UUID) -> None: ...

    async def delete_by_role(self, role_id: UUID) -> None: ...
