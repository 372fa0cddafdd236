"""Delete permission override use case."""

from uuid import UUID

from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import require_same_tenant, require_user_id
from garage_rbac.domain.exceptions import NotFoundError
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext


class DeletePermissionOverrideUseCase:
    """Remove a user's override, returning them to the role baseline."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor: AuthContext, user_id: str, permission_id: UUID) -> None:
        require_permission(actor, "users.manage_permissions")
        user_id = require_user_id(user_id)

        async with self._uow_factory() as uow:
            await require_same_tenant(uow, actor, user_id)
            if not await uow.overrides.get_for_permission(user_id, permission_id):
                raise NotFoundError("Permission override", f"{user_id}/{permission_id}")
            await uow.overrides.delete(user_id, permission_id)

        self._permission_checker.on_role_or_override_changed(user_id)
