"""Role DTOs."""

from dataclasses import dataclass, field
from uuid import UUID

from garage_rbac.domain.value_objects import PermissionKey


@dataclass
class RoleCreateInput:
    """Input for creating a custom role."""

    key: str
    name: str
    description: str | None = None
    permission_ids: list[UUID] = field(default_factory=list)


@dataclass
class RoleUpdateInput:
    """Partial update of role metadata. None leaves a field unchanged."""

    name: str | None = None
    description: str | None = None
    is_active: bool | None = None


@dataclass
class RolePermissionsDiff:
    """Result of replacing a role's permission set."""

    role_id: UUID
    added: frozenset[PermissionKey]
    removed: frozenset[PermissionKey]
    affected_user_ids: list[str]

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)
