"""Resolve permissions use case."""

from datetime import UTC, datetime

from garage_rbac.application.ports import UnitOfWork
from garage_rbac.application.use_cases.lookup import require_user_id
from garage_rbac.domain.catalog import PermissionCatalog
from garage_rbac.domain.exceptions import NotFoundError
from garage_rbac.domain.services import (
    PermissionSource,
    Resolution,
    require_permission,
    resolve,
)
from garage_rbac.domain.value_objects import SUPER_ROLE_KEY, AuthContext, PermissionKey


async def fetch_resolution(
    uow: UnitOfWork,
    user_id: str,
    now: datetime,
    *,
    super_role_key: str = SUPER_ROLE_KEY,
) -> Resolution:
    """Fetch roles, overrides and catalog for user, then resolve.

    Resolution starts only once all three reads have completed.
    """
    roles = await uow.user_roles.list_roles_for_user(user_id)
    overrides = await uow.overrides.list_by_user(user_id)
    catalog = PermissionCatalog(await uow.permissions.list_active())
    return resolve(user_id, roles, overrides, now, catalog, super_role_key=super_role_key)


class ResolvePermissionsUseCase:
    """Effective permissions of any user, with per-key sources, for admin screens.

    Always reads the store; the per-user cache is for the caller's own checks.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        super_role_key: str = SUPER_ROLE_KEY,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._super_role_key = super_role_key

    async def execute(
        self,
        actor: AuthContext,
        user_id: str,
        now: datetime | None = None,
    ) -> Resolution:
        """Users may inspect themselves; others need users.view."""
        user_id = require_user_id(user_id)
        if actor.user_id != user_id:
            require_permission(actor, "users.view")

        async with self._uow_factory() as uow:
            resolution = await fetch_resolution(
                uow,
                user_id,
                now or datetime.now(UTC),
                super_role_key=self._super_role_key,
            )

        if (
            actor.user_id != user_id
            and resolution.tenant_id is not None
            and resolution.tenant_id != actor.tenant_id
        ):
            raise NotFoundError("User", user_id)
        return resolution


class ExplainPermissionsUseCase:
    """Per-key source of a user's permissions, including revoked keys."""

    def __init__(self, resolve_permissions: ResolvePermissionsUseCase) -> None:
        self._resolve = resolve_permissions

    async def execute(
        self,
        actor: AuthContext,
        user_id: str,
        now: datetime | None = None,
    ) -> dict[PermissionKey, PermissionSource]:
        resolution = await self._resolve.execute(actor, user_id, now)
        return dict(sorted(resolution.sources.items()))
