"""PostgreSQL role repository implementation."""

import logging
from uuid import UUID

from psycopg import AsyncConnection

from garage_rbac.domain.entities import Role
from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.domain.value_objects import PermissionKey

logger = logging.getLogger(__name__)

# Roles carry the keys of their active catalog permissions.
ROLE_SELECT = (
    "SELECT r.id, r.tenant_id, r.key, r.name, r.description, r.is_system_role, "
    "r.is_active, r.created_by, r.created_at, r.updated_at, "
    "COALESCE(array_agg(p.key) FILTER (WHERE p.key IS NOT NULL), '{}') "
    "FROM role r "
    "LEFT JOIN role_permission rp ON rp.role_id = r.id "
    "LEFT JOIN permission p ON p.id = rp.permission_id AND p.is_active "
)


def _to_keys(values: list[str]) -> frozenset[PermissionKey]:
    keys = set()
    for value in values:
        try:
            keys.add(PermissionKey(value))
        except ValidationError:
            logger.warning("Skipping malformed permission key %r on role", value)
    return frozenset(keys)


def row_to_role(r: tuple) -> Role:
    return Role(
        id=r[0],
        tenant_id=r[1],
        key=r[2],
        name=r[3],
        description=r[4],
        is_system_role=r[5],
        is_active=r[6],
        created_by=r[7],
        created_at=r[8],
        updated_at=r[9],
        permissions=_to_keys(r[10]),
    )


class PostgresRoleRepository:
    """Role repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, role_id: UUID) -> Role | None:
        """Get role by id."""
        cur = await self._conn.execute(
            ROLE_SELECT + "WHERE r.id = %s GROUP BY r.id",
            (role_id,),
        )
        r = await cur.fetchone()
        return row_to_role(r) if r else None

    async def get_by_key(self, tenant_id: UUID, key: str) -> Role | None:
        """Get role by key within tenant."""
        cur = await self._conn.execute(
            ROLE_SELECT + "WHERE r.tenant_id = %s AND r.key = %s GROUP BY r.id",
            (tenant_id, key),
        )
        r = await cur.fetchone()
        return row_to_role(r) if r else None

    async def list_by_tenant(self, tenant_id: UUID) -> list[Role]:
        """List roles of tenant, system roles first."""
        cur = await self._conn.execute(
            ROLE_SELECT
            + "WHERE r.tenant_id = %s GROUP BY r.id "
            "ORDER BY r.is_system_role DESC, r.created_at DESC",
            (tenant_id,),
        )
        rows = await cur.fetchall()
        return [row_to_role(r) for r in rows]

    async def create(self, role: Role) -> Role:
        """Create role (without permission links)."""
        await self._conn.execute(
            "INSERT INTO role (id, tenant_id, key, name, description, is_system_role, "
            "is_active, created_by, created_at, updated_at) "
            "VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)",
            (
                role.id,
                role.tenant_id,
                role.key,
                role.name,
                role.description,
                role.is_system_role,
                role.is_active,
                role.created_by,
                role.created_at,
                role.updated_at,
            ),
        )
        return role

    async def update(self, role: Role) -> None:
        """Update role metadata."""
        await self._conn.execute(
            "UPDATE role SET name=%s, description=%s, is_active=%s, updated_at=%s "
            "WHERE id=%s",
            (role.name, role.description, role.is_active, role.updated_at, role.id),
        )

    async def set_permissions(
        self, role_id: UUID, permission_ids: list[UUID], granted_by: str | None = None
    ) -> None:
        """Replace role's permission links."""
        await self._conn.execute(
            "DELETE FROM role_permission WHERE role_id = %s",
            (role_id,),
        )
        if not permission_ids:
            return
        async with self._conn.cursor() as cur:
            await cur.executemany(
                "INSERT INTO role_permission (role_id, permission_id, granted_by) "
                "VALUES (%s, %s, %s)",
                [(role_id, pid, granted_by) for pid in permission_ids],
            )

    async def delete(self, role_id: UUID) -> None:
        """Delete role; role_permission rows cascade."""
        await self._conn.execute(
            "DELETE FROM role WHERE id = %s",
            (role_id,),
        )
