"""Permission override DTOs."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass
class OverrideInput:
    """Grant (``is_granted=True``) or revoke one permission for one user."""

    user_id: str
    permission_id: UUID
    is_granted: bool
    reason: str | None = None
    expires_at: datetime | None = None
