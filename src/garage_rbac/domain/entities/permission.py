"""Permission entity - one catalog entry."""

from dataclasses import dataclass
from uuid import UUID

from garage_rbac.domain.value_objects import Action, PermissionCategory, PermissionKey, Resource


@dataclass(frozen=True)
class Permission:
    """Catalog entry for a ``resource.action`` key.

    Retired entries are deactivated, never deleted, so overrides that still
    reference them stay interpretable.
    """

    id: UUID
    key: PermissionKey
    category: PermissionCategory
    display_order: int = 0
    is_active: bool = True
    name_en: str = ""
    description: str | None = None

    @property
    def resource(self) -> Resource:
        return self.key.resource

    @property
    def action(self) -> Action:
        return self.key.action
