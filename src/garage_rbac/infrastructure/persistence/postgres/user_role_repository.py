"""PostgreSQL user-role assignment repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from garage_rbac.domain.entities import Role, UserRoleAssignment
from garage_rbac.infrastructure.persistence.postgres.role_repository import (
    ROLE_SELECT,
    row_to_role,
)


class PostgresUserRoleRepository:
    """User-role assignment repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_roles_for_user(self, user_id: str) -> list[Role]:
        """Active roles held by user, with their permission keys."""
        cur = await self._conn.execute(
            ROLE_SELECT
            + "JOIN user_role ur ON ur.role_id = r.id "
            "WHERE ur.user_id = %s AND r.is_active "
            "GROUP BY r.id ORDER BY r.is_system_role DESC, r.name",
            (user_id,),
        )
        rows = await cur.fetchall()
        return [row_to_role(r) for r in rows]

    async def get(self, user_id: str, role_id: UUID) -> UserRoleAssignment | None:
        """Get assignment of role to user."""
        cur = await self._conn.execute(
            "SELECT id, user_id, role_id, created_at, assigned_by "
            "FROM user_role WHERE user_id = %s AND role_id = %s",
            (user_id, role_id),
        )
        r = await cur.fetchone()
        if not r:
            return None
        return UserRoleAssignment(
            id=r[0], user_id=r[1], role_id=r[2], created_at=r[3], assigned_by=r[4]
        )

    async def list_user_ids_for_role(self, role_id: UUID) -> list[str]:
        """Users holding role."""
        cur = await self._conn.execute(
            "SELECT user_id FROM user_role WHERE role_id = %s ORDER BY user_id",
            (role_id,),
        )
        rows = await cur.fetchall()
        return [r[0] for r in rows]

    async def create(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        """Create assignment."""
        await self._conn.execute(
            "INSERT INTO user_role (id, user_id, role_id, created_at, assigned_by) "
            "VALUES (%s, %s, %s, %s, %s)",
            (
                assignment.id,
                assignment.user_id,
                assignment.role_id,
                assignment.created_at,
                assignment.assigned_by,
            ),
        )
        return assignment

    async def delete(self, user_id: str, role_id: UUID) -> None:
        """Delete assignment."""
        await self._conn.execute(
            "DELETE FROM user_role WHERE user_id = %s AND role_id = %s",
            (user_id, role_id),
        )

    async def delete_by_role(self, role_id: UUID) -> None:
        """Delete all assignments of role."""
        await self._conn.execute(
            "DELETE FROM user_role WHERE role_id = %s",
            (role_id,),
        )
