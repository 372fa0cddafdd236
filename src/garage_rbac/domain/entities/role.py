"""Role entity for RBAC."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from garage_rbac.domain.value_objects import PermissionKey


@dataclass
class Role:
    """Named bundle of permission keys, scoped to a tenant."""

    id: UUID
    tenant_id: UUID
    key: str
    name: str
    description: str | None = None
    is_system_role: bool = False
    is_active: bool = True
    permissions: frozenset[PermissionKey] = field(default_factory=frozenset)
    created_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
