"""Delete role use case."""

import logging
from uuid import UUID

from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import get_tenant_role
from garage_rbac.domain.exceptions import ConflictError
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext

logger = logging.getLogger(__name__)


class DeleteRoleUseCase:
    """Delete a custom role, cascading its permission links and assignments."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor: AuthContext, role_id: UUID) -> list[str]:
        """Delete role. Returns ids of users who lost the role."""
        require_permission(actor, "roles.delete")

        async with self._uow_factory() as uow:
            role = await get_tenant_role(uow, actor, role_id)
            if role.is_system_role:
                raise ConflictError(f"Cannot delete system role: {role.key}")

            holders = await uow.user_roles.list_user_ids_for_role(role.id)
            await uow.user_roles.delete_by_role(role.id)
            await uow.roles.delete(role.id)

        self._permission_checker.on_roles_changed(holders)
        logger.info("Role %s deleted by %s (%d holders)", role.key, actor.user_id, len(holders))
        return holders
