"""Auth context - explicit "who is asking and what may they do" value."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from garage_rbac.domain.value_objects.permission_key import PermissionKey


@dataclass(frozen=True)
class AuthContext:
    """Resolved authorization state for one user.

    Passed explicitly into every guard call. ``expires_at`` is the instant after
    which the context must be re-resolved: the earlier of the cache TTL and the
    next override expiry.
    """

    user_id: str
    tenant_id: UUID | None = None
    role_keys: frozenset[str] = field(default_factory=frozenset)
    permissions: frozenset[PermissionKey] = field(default_factory=frozenset)
    is_super_role: bool = False
    resolved_at: datetime | None = None
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """True once ``now`` reaches ``expires_at``."""
        return self.expires_at is not None and now >= self.expires_at

    def has_role(self, role_key: str) -> bool:
        return role_key in self.role_keys

    @classmethod
    def denied(cls, user_id: str, tenant_id: UUID | None = None) -> "AuthContext":
        """Context that passes no check (signed out, unknown user)."""
        return cls(user_id=user_id, tenant_id=tenant_id)
