"""Permission override entity - per-user grant or revocation."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class PermissionOverride:
    """Explicit exception to a user's role-derived permissions.

    ``is_granted=True`` adds the permission, ``False`` removes it. Past
    ``expires_at`` makes the override inert without deleting it.
    """

    id: UUID
    user_id: str
    permission_id: UUID
    is_granted: bool
    created_at: datetime
    reason: str | None = None
    granted_by: str | None = None
    expires_at: datetime | None = None

    def is_active_at(self, now: datetime) -> bool:
        return self.expires_at is None or self.expires_at > now
