"""PostgreSQL permission override repository implementation."""

from uuid import UUID

from psycopg import AsyncConnection

from garage_rbac.domain.entities import PermissionOverride

_COLUMNS = (
    "id, user_id, permission_id, is_granted, created_at, reason, granted_by, expires_at"
)


def _row_to_override(r: tuple) -> PermissionOverride:
    return PermissionOverride(
        id=r[0],
        user_id=r[1],
        permission_id=r[2],
        is_granted=r[3],
        created_at=r[4],
        reason=r[5],
        granted_by=r[6],
        expires_at=r[7],
    )


class PostgresOverrideRepository:
    """Permission override repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def list_by_user(self, user_id: str) -> list[PermissionOverride]:
        """All overrides of user, expired ones included."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission_override WHERE user_id = %s "
            "ORDER BY created_at",
            (user_id,),
        )
        rows = await cur.fetchall()
        return [_row_to_override(r) for r in rows]

    async def get_for_permission(
        self, user_id: str, permission_id: UUID
    ) -> PermissionOverride | None:
        """Get override for (user, permission)."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission_override "
            "WHERE user_id = %s AND permission_id = %s",
            (user_id, permission_id),
        )
        r = await cur.fetchone()
        return _row_to_override(r) if r else None

    async def upsert(self, override: PermissionOverride) -> PermissionOverride:
        """Insert override, replacing the existing decision for the pair."""
        cur = await self._conn.execute(
            "INSERT INTO permission_override "
            f"({_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s, %s) "
            "ON CONFLICT (user_id, permission_id) DO UPDATE SET "
            "is_granted = EXCLUDED.is_granted, created_at = EXCLUDED.created_at, "
            "reason = EXCLUDED.reason, granted_by = EXCLUDED.granted_by, "
            "expires_at = EXCLUDED.expires_at "
            f"RETURNING {_COLUMNS}",
            (
                override.id,
                override.user_id,
                override.permission_id,
                override.is_granted,
                override.created_at,
                override.reason,
                override.granted_by,
                override.expires_at,
            ),
        )
        r = await cur.fetchone()
        return _row_to_override(r)

    async def delete(self, user_id: str, permission_id: UUID) -> None:
        """Delete override for (user, permission)."""
        await self._conn.execute(
            "DELETE FROM permission_override WHERE user_id = %s AND permission_id = %s",
            (user_id, permission_id),
        )
