"""Replace a role's permission set."""

import logging
from uuid import UUID

from garage_rbac.application.dto.role_dto import RolePermissionsDiff
from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import get_tenant_role, load_permission_keys
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext

logger = logging.getLogger(__name__)


class SetRolePermissionsUseCase:
    """Replace-semantics: the supplied ids become the role's complete set."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(
        self,
        actor: AuthContext,
        role_id: UUID,
        permission_ids: list[UUID],
    ) -> RolePermissionsDiff:
        """Replace permissions and invalidate every holder of the role."""
        require_permission(actor, "roles.manage_permissions")

        async with self._uow_factory() as uow:
            role = await get_tenant_role(uow, actor, role_id)
            keys = await load_permission_keys(uow, permission_ids)
            new_keys = frozenset(keys.values())

            await uow.roles.set_permissions(role.id, list(keys), granted_by=actor.user_id)
            holders = await uow.user_roles.list_user_ids_for_role(role.id)

        diff = RolePermissionsDiff(
            role_id=role.id,
            added=new_keys - role.permissions,
            removed=role.permissions - new_keys,
            affected_user_ids=holders,
        )
        self._permission_checker.on_roles_changed(holders)
        logger.info(
            "Role %s permissions replaced by %s: +%s -%s",
            role.key,
            actor.user_id,
            sorted(diff.added),
            sorted(diff.removed),
        )
        return diff
