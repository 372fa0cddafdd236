"""Unassign role use case."""

from uuid import UUID

from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import get_tenant_role, require_user_id
from garage_rbac.domain.exceptions import NotFoundError
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext


class UnassignRoleUseCase:
    """Remove a role from a user."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor: AuthContext, user_id: str, role_id: UUID) -> None:
        require_permission(actor, "users.manage_roles")
        user_id = require_user_id(user_id)

        async with self._uow_factory() as uow:
            role = await get_tenant_role(uow, actor, role_id)
            if not await uow.user_roles.get(user_id, role.id):
                raise NotFoundError("Role assignment", f"{user_id}/{role_id}")
            await uow.user_roles.delete(user_id, role.id)

        self._permission_checker.on_role_or_override_changed(user_id)
