"""Grant or revoke a single permission for a user."""

import logging
from datetime import UTC, datetime
from uuid import uuid4

from garage_rbac.application.dto.override_dto import OverrideInput
from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import require_same_tenant, require_user_id
from garage_rbac.domain.entities import PermissionOverride
from garage_rbac.domain.exceptions import NotFoundError, ValidationError
from garage_rbac.domain.services import require_permission
from garage_rbac.domain.value_objects import AuthContext

logger = logging.getLogger(__name__)


class SetPermissionOverrideUseCase:
    """Upsert the override for (user_id, permission_id).

    A new decision supersedes the previous one; history per pair is not kept.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._permission_checker = permission_checker

    async def execute(self, actor: AuthContext, data: OverrideInput) -> PermissionOverride:
        require_permission(actor, "users.manage_permissions")
        user_id = require_user_id(data.user_id)

        now = datetime.now(UTC)
        if data.expires_at is not None:
            if data.expires_at.tzinfo is None:
                raise ValidationError("expires_at must be timezone-aware")
            if data.expires_at <= now:
                raise ValidationError("expires_at must be in the future")

        async with self._uow_factory() as uow:
            await require_same_tenant(uow, actor, user_id)
            permission = await uow.permissions.get_by_id(data.permission_id)
            if not permission or not permission.is_active:
                raise NotFoundError("Permission", data.permission_id)

            override = await uow.overrides.upsert(
                PermissionOverride(
                    id=uuid4(),
                    user_id=user_id,
                    permission_id=permission.id,
                    is_granted=data.is_granted,
                    created_at=now,
                    reason=data.reason,
                    granted_by=actor.user_id,
                    expires_at=data.expires_at,
                )
            )

        self._permission_checker.on_role_or_override_changed(user_id)
        logger.info(
            "%s %s for user %s by %s (expires %s)",
            "Granted" if data.is_granted else "Revoked",
            permission.key,
            user_id,
            actor.user_id,
            data.expires_at,
        )
        return override
