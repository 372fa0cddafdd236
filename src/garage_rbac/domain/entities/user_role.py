"""User-role assignment entity."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class UserRoleAssignment:
    """User (subject) holds role. Unique per (user_id, role_id)."""

    id: UUID
    user_id: str
    role_id: UUID
    created_at: datetime
    assigned_by: str | None = None
