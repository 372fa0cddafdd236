"""Assign role use case."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import (
    get_tenant_role,
    require_same_tenant,
    require_user_id,
)
from garage_rbac.domain.entities import UserRoleAssignment
from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext


class AssignRoleUseCase:
    """Assign a role to a user."""

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor: AuthContext, user_id: str, role_id: UUID) -> UserRoleAssignment:
        """Assign role to user. Already-held roles return the existing assignment."""
        require_permission(actor, "users.manage_roles")
        user_id = require_user_id(user_id)

        async with self._uow_factory() as uow:
            role = await get_tenant_role(uow, actor, role_id)
            await require_same_tenant(uow, actor, user_id)
            if not role.is_active:
                raise ValidationError(f"Role is inactive: {role.key}")

            existing = await uow.user_roles.get(user_id, role.id)
            if existing:
                return existing

            assignment = UserRoleAssignment(
                id=uuid4(),
                user_id=user_id,
                role_id=role.id,
                created_at=datetime.now(UTC),
                assigned_by=actor.user_id,
            )
            await uow.user_roles.create(assignment)

        self._permission_checker.on_role_or_override_changed(user_id)
        return assignment
