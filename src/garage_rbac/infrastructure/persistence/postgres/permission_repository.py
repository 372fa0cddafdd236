"""PostgreSQL permission catalog repository."""

import logging
from uuid import UUID

from psycopg import AsyncConnection

from garage_rbac.domain.entities import Permission
from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.domain.value_objects import PermissionCategory, PermissionKey

logger = logging.getLogger(__name__)

_COLUMNS = "id, key, category, display_order, is_active, name_en, description"


def _row_to_permission(r: tuple) -> Permission | None:
    try:
        key = PermissionKey(r[1])
        category = PermissionCategory(r[2])
    except (ValidationError, ValueError):
        logger.warning("Skipping malformed catalog row %s (%r)", r[0], r[1])
        return None
    return Permission(
        id=r[0],
        key=key,
        category=category,
        display_order=r[3],
        is_active=r[4],
        name_en=r[5] or "",
        description=r[6],
    )


class PostgresPermissionRepository:
    """Permission catalog repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        """Get catalog entry by id."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE id = %s",
            (permission_id,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def get_by_key(self, key: str) -> Permission | None:
        """Get catalog entry by key."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE key = %s",
            (key,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def list_active(
        self, category: PermissionCategory | None = None
    ) -> list[Permission]:
        """List active catalog entries, optionally for one category."""
        if category is None:
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM permission WHERE is_active "
                "ORDER BY display_order, key"
            )
        else:
            cur = await self._conn.execute(
                f"SELECT {_COLUMNS} FROM permission WHERE is_active AND category = %s "
                "ORDER BY display_order, key",
                (category.value,),
            )
        rows = await cur.fetchall()
        return [p for p in (_row_to_permission(r) for r in rows) if p is not None]
