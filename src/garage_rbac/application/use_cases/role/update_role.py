"""Update role use case."""

from datetime import UTC, datetime
from uuid import UUID

from garage_rbac.application.dto.role_dto import RoleUpdateInput
from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import get_tenant_role
from garage_rbac.domain.entities import Role
from garage_rbac.domain.exceptions import ConflictError, ValidationError
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext


class UpdateRoleUseCase:
    """Update role name, description or active flag."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor: AuthContext, role_id: UUID, data: RoleUpdateInput) -> Role:
        """Apply non-None fields. System roles cannot be deactivated."""
        require_permission(actor, "roles.update")

        holders: list[str] = []
        async with self._uow_factory() as uow:
            role = await get_tenant_role(uow, actor, role_id)

            if data.name is not None:
                if not data.name.strip():
                    raise ValidationError("Role name is required")
                role.name = data.name.strip()
            if data.description is not None:
                role.description = data.description
            if data.is_active is not None and data.is_active != role.is_active:
                if role.is_system_role and not data.is_active:
                    raise ConflictError(f"Cannot deactivate system role: {role.key}")
                role.is_active = data.is_active
                holders = await uow.user_roles.list_user_ids_for_role(role.id)

            role.updated_at = datetime.now(UTC)
            await uow.roles.update(role)

        self._permission_checker.on_roles_changed(holders)
        return role
