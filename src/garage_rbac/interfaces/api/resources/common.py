"""Helpers shared by API resources."""

from datetime import datetime
from typing import Any
from uuid import UUID

import falcon
import falcon.asgi

from garage_rbac.application.ports import PermissionChecker
from garage_rbac.domain.entities import PermissionOverride, Role
from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.domain.value_objects import AuthContext
from garage_rbac.interfaces.api.middleware.auth import RequestUser


def current_user(req: falcon.asgi.Request) -> RequestUser:
    user = getattr(req.context, "user", None)
    if not user:
        raise falcon.HTTPUnauthorized(title="Unauthorized")
    return user


async def current_context(
    req: falcon.asgi.Request, permission_checker: PermissionChecker
) -> AuthContext:
    """AuthContext of the calling user."""
    return await permission_checker.load_context(current_user(req).user_id)


async def read_body(req: falcon.asgi.Request) -> dict[str, Any]:
    body = await req.get_media()
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def parse_uuid(value: Any, field: str) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {field}: {value}") from e


def parse_datetime(value: Any, field: str) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: {value}") from e


def role_to_dict(role: Role) -> dict[str, Any]:
    return {
        "id": str(role.id),
        "tenant_id": str(role.tenant_id),
        "key": role.key,
        "name": role.name,
        "description": role.description,
        "is_system_role": role.is_system_role,
        "is_active": role.is_active,
        "permissions": sorted(role.permissions),
        "created_at": role.created_at.isoformat() if role.created_at else None,
        "updated_at": role.updated_at.isoformat() if role.updated_at else None,
    }


def override_to_dict(override: PermissionOverride) -> dict[str, Any]:
    return {
        "id": str(override.id),
        "user_id": override.user_id,
        "permission_id": str(override.permission_id),
        "is_granted": override.is_granted,
        "reason": override.reason,
        "granted_by": override.granted_by,
        "created_at": override.created_at.isoformat(),
        "expires_at": override.expires_at.isoformat() if override.expires_at else None,
    }
