"""Permission catalog categories."""

from enum import StrEnum


class PermissionCategory(StrEnum):
    """Grouping used to order the catalog on admin screens."""

    GENERAL = "general"
    OPERATIONS = "operations"
    FINANCIAL = "financial"
    REPORTS = "reports"
    ADMINISTRATION = "administration"


CATEGORY_ORDER: dict[PermissionCategory, int] = {
    category: position for position, category in enumerate(PermissionCategory)
}
