"""Permission API resources: catalog, checks, effective sets and overrides."""

import falcon.asgi

from garage_rbac.application.dto.override_dto import OverrideInput
from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.override.delete_override import (
    DeletePermissionOverrideUseCase,
)
from garage_rbac.application.use_cases.override.set_override import (
    SetPermissionOverrideUseCase,
)
from garage_rbac.application.use_cases.permission.resolve_permissions import (
    ExplainPermissionsUseCase,
    ResolvePermissionsUseCase,
)
from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.domain.services import can, can_any, require_permission
from garage_rbac.domain.value_objects import PermissionCategory
from garage_rbac.interfaces.api.resources.common import (
    current_context,
    override_to_dict,
    parse_datetime,
    parse_uuid,
    read_body,
)


class PermissionCatalogResource:
    """GET /v1/permissions - active catalog, optionally by category."""

    def __init__(self, unit_of_work_factory: type, permission_checker: PermissionChecker) -> None:
        self._uow_factory = unit_of_work_factory
        self._checker = permission_checker

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = await current_context(req, self._checker)
        require_permission(actor, "roles.view")

        category = req.get_param("category")
        if category is not None:
            try:
                category = PermissionCategory(category)
            except ValueError as e:
                raise ValidationError(f"Unknown category: {category}") from e

        async with self._uow_factory() as uow:
            permissions = await uow.permissions.list_active(category=category)

        resp.media = {
            "items": [
                {
                    "id": str(p.id),
                    "key": str(p.key),
                    "category": str(p.category),
                    "display_order": p.display_order,
                    "name": p.name_en,
                    "description": p.description,
                }
                for p in permissions
            ]
        }
        resp.status = falcon.HTTP_200


class MyPermissionsResource:
    """GET /v1/me/permissions - the caller's own effective set."""

    def __init__(self, permission_checker: PermissionChecker) -> None:
        self._checker = permission_checker

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        context = await current_context(req, self._checker)
        resp.media = {
            "user_id": context.user_id,
            "tenant_id": str(context.tenant_id) if context.tenant_id else None,
            "roles": sorted(context.role_keys),
            "is_super_role": context.is_super_role,
            "permissions": sorted(context.permissions),
            "expires_at": context.expires_at.isoformat() if context.expires_at else None,
        }
        resp.status = falcon.HTTP_200


class PermissionCheckResource:
    """GET /v1/permissions/check and POST /v1/permissions/check-any."""

    def __init__(self, permission_checker: PermissionChecker) -> None:
        self._checker = permission_checker

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        """Check one key; ``edit=true`` also needs create, update or delete."""
        permission = req.get_param("permission")
        if not permission:
            raise ValidationError("permission is required")
        require_edit = req.get_param_as_bool("edit") or False
        context = await current_context(req, self._checker)
        resp.media = {"allowed": can(context, permission, require_edit=require_edit)}
        resp.status = falcon.HTTP_200

    async def on_post_any(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await read_body(req)
        permissions = body.get("permissions")
        if not isinstance(permissions, list):
            raise ValidationError("permissions must be a list")
        context = await current_context(req, self._checker)
        resp.media = {"allowed": can_any(context, [str(p) for p in permissions])}
        resp.status = falcon.HTTP_200


class UserPermissionsResource:
    """GET /v1/users/{user_id}/permissions[?explain=true]."""

    def __init__(
        self,
        resolve_permissions: ResolvePermissionsUseCase,
        explain_permissions: ExplainPermissionsUseCase,
        permission_checker: PermissionChecker,
    ) -> None:
        self._resolve = resolve_permissions
        self._explain = explain_permissions
        self._checker = permission_checker

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        actor = await current_context(req, self._checker)
        if req.get_param_as_bool("explain"):
            sources = await self._explain.execute(actor, user_id)
            resp.media = {
                "user_id": user_id.strip(),
                "sources": {key: str(source) for key, source in sources.items()},
            }
            resp.status = falcon.HTTP_200
            return

        resolution = await self._resolve.execute(actor, user_id)
        resp.media = {
            "user_id": resolution.user_id,
            "roles": sorted(resolution.role_keys),
            "is_super_role": resolution.is_super_role,
            "permissions": sorted(resolution.permissions),
        }
        resp.status = falcon.HTTP_200


class UserOverridesResource:
    """POST /v1/users/{user_id}/overrides - grant or revoke one permission."""

    def __init__(
        self,
        set_override: SetPermissionOverrideUseCase,
        permission_checker: PermissionChecker,
    ) -> None:
        self._set_override = set_override
        self._checker = permission_checker

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        body = await read_body(req)
        if "permission_id" not in body or "is_granted" not in body:
            raise ValidationError("permission_id and is_granted are required")
        if not isinstance(body["is_granted"], bool):
            raise ValidationError("is_granted must be a boolean")
        data = OverrideInput(
            user_id=user_id,
            permission_id=parse_uuid(body["permission_id"], "permission_id"),
            is_granted=body["is_granted"],
            reason=body.get("reason"),
            expires_at=parse_datetime(body.get("expires_at"), "expires_at"),
        )

        actor = await current_context(req, self._checker)
        override = await self._set_override.execute(actor, data)
        resp.media = override_to_dict(override)
        resp.status = falcon.HTTP_201


class UserOverrideResource:
    """DELETE /v1/users/{user_id}/overrides/{permission_id}."""

    def __init__(
        self,
        delete_override: DeletePermissionOverrideUseCase,
        permission_checker: PermissionChecker,
    ) -> None:
        self._delete_override = delete_override
        self._checker = permission_checker

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        permission_id: str,
    ) -> None:
        actor = await current_context(req, self._checker)
        await self._delete_override.execute(
            actor, user_id, parse_uuid(permission_id, "permission_id")
        )
        resp.status = falcon.HTTP_204
