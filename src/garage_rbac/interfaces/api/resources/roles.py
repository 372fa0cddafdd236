"""Role API resources: CRUD, permission sets and user assignments."""

import falcon.asgi

from garage_rbac.application.dto.role_dto import RoleCreateInput, RoleUpdateInput
from garage_rbac.application.ports import PermissionChecker
from garage_rbac.application.use_cases.lookup import get_tenant_role, require_tenant
from garage_rbac.application.use_cases.role.assign_role import AssignRoleUseCase
from garage_rbac.application.use_cases.role.create_role import CreateRoleUseCase
from garage_rbac.application.use_cases.role.delete_role import DeleteRoleUseCase
from garage_rbac.application.use_cases.role.set_role_permissions import (
    SetRolePermissionsUseCase,
)
from garage_rbac.application.use_cases.role.unassign_role import UnassignRoleUseCase
from garage_rbac.application.use_cases.role.update_role import UpdateRoleUseCase
from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.domain.services import require_permission
from garage_rbac.interfaces.api.resources.common import (
    current_context,
    parse_uuid,
    read_body,
    role_to_dict,
)


def _permission_ids(body: dict) -> list:
    ids = body.get("permission_ids", [])
    if not isinstance(ids, list):
        raise ValidationError("permission_ids must be a list")
    return [parse_uuid(i, "permission_id") for i in ids]


class RolesResource:
    """GET/POST /v1/roles - list and create roles of the caller's tenant."""

    def __init__(
        self,
        create_role: CreateRoleUseCase,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._create_role = create_role
        self._uow_factory = unit_of_work_factory
        self._checker = permission_checker

    async def on_get(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        actor = await current_context(req, self._checker)
        require_permission(actor, "roles.view")
        tenant_id = require_tenant(actor)

        async with self._uow_factory() as uow:
            roles = await uow.roles.list_by_tenant(tenant_id)

        resp.media = {"items": [role_to_dict(r) for r in roles]}
        resp.status = falcon.HTTP_200

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        body = await read_body(req)
        data = RoleCreateInput(
            key=str(body.get("key") or ""),
            name=str(body.get("name") or ""),
            description=body.get("description"),
            permission_ids=_permission_ids(body),
        )

        actor = await current_context(req, self._checker)
        role = await self._create_role.execute(actor, data)
        resp.media = role_to_dict(role)
        resp.status = falcon.HTTP_201


class RoleResource:
    """GET/PATCH/DELETE /v1/roles/{role_id}."""

    def __init__(
        self,
        update_role: UpdateRoleUseCase,
        delete_role: DeleteRoleUseCase,
        unit_of_work_factory: type,
        permission_checker: PermissionChecker,
    ) -> None:
        self._update_role = update_role
        self._delete_role = delete_role
        self._uow_factory = unit_of_work_factory
        self._checker = permission_checker

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        actor = await current_context(req, self._checker)
        require_permission(actor, "roles.view")
        async with self._uow_factory() as uow:
            role = await get_tenant_role(uow, actor, parse_uuid(role_id, "role_id"))
        resp.media = role_to_dict(role)
        resp.status = falcon.HTTP_200

    async def on_patch(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        body = await read_body(req)
        is_active = body.get("is_active")
        if is_active is not None and not isinstance(is_active, bool):
            raise ValidationError("is_active must be a boolean")
        data = RoleUpdateInput(
            name=body.get("name"),
            description=body.get("description"),
            is_active=is_active,
        )

        actor = await current_context(req, self._checker)
        role = await self._update_role.execute(actor, parse_uuid(role_id, "role_id"), data)
        resp.media = role_to_dict(role)
        resp.status = falcon.HTTP_200

    async def on_delete(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        actor = await current_context(req, self._checker)
        await self._delete_role.execute(actor, parse_uuid(role_id, "role_id"))
        resp.status = falcon.HTTP_204


class RolePermissionsResource:
    """PUT /v1/roles/{role_id}/permissions - replace the role's permission set."""

    def __init__(
        self,
        set_role_permissions: SetRolePermissionsUseCase,
        permission_checker: PermissionChecker,
    ) -> None:
        self._set_role_permissions = set_role_permissions
        self._checker = permission_checker

    async def on_put(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, role_id: str
    ) -> None:
        body = await read_body(req)
        if "permission_ids" not in body:
            raise ValidationError("permission_ids is required")
        permission_ids = _permission_ids(body)

        actor = await current_context(req, self._checker)
        diff = await self._set_role_permissions.execute(
            actor, parse_uuid(role_id, "role_id"), permission_ids
        )
        resp.media = {
            "role_id": str(diff.role_id),
            "added": sorted(diff.added),
            "removed": sorted(diff.removed),
            "affected_users": len(diff.affected_user_ids),
        }
        resp.status = falcon.HTTP_200


class UserRolesResource:
    """POST /v1/users/{user_id}/roles - assign a role."""

    def __init__(
        self,
        assign_role: AssignRoleUseCase,
        permission_checker: PermissionChecker,
    ) -> None:
        self._assign_role = assign_role
        self._checker = permission_checker

    async def on_post(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response, user_id: str
    ) -> None:
        body = await read_body(req)
        if "role_id" not in body:
            raise ValidationError("role_id is required")
        role_id = parse_uuid(body["role_id"], "role_id")

        actor = await current_context(req, self._checker)
        assignment = await self._assign_role.execute(actor, user_id, role_id)
        resp.media = {
            "id": str(assignment.id),
            "user_id": assignment.user_id,
            "role_id": str(assignment.role_id),
            "assigned_by": assignment.assigned_by,
            "created_at": assignment.created_at.isoformat(),
        }
        resp.status = falcon.HTTP_201


class UserRoleResource:
    """DELETE /v1/users/{user_id}/roles/{role_id} - unassign a role."""

    def __init__(
        self,
        unassign_role: UnassignRoleUseCase,
        permission_checker: PermissionChecker,
    ) -> None:
        self._unassign_role = unassign_role
        self._checker = permission_checker

    async def on_delete(
        self,
        req: falcon.asgi.Request,
        resp: falcon.asgi.Response,
        user_id: str,
        role_id: str,
    ) -> None:
        actor = await current_context(req, self._checker)
        await self._unassign_role.execute(actor, user_id, parse_uuid(role_id, "role_id"))
        resp.status = falcon.HTTP_204
