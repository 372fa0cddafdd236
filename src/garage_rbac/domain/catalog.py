"""Permission catalog - registry of recognized permission keys and seed data."""

from collections.abc import Iterable, Iterator
from uuid import NAMESPACE_URL, UUID, uuid5

from garage_rbac.domain.entities import Permission
from garage_rbac.domain.value_objects import (
    CATEGORY_ORDER,
    PermissionCategory,
    PermissionKey,
    SystemRole,
)

_GENERAL = PermissionCategory.GENERAL
_OPERATIONS = PermissionCategory.OPERATIONS
_FINANCIAL = PermissionCategory.FINANCIAL
_REPORTS = PermissionCategory.REPORTS
_ADMINISTRATION = PermissionCategory.ADMINISTRATION

# (key, category, display_order, english name)
SEED_PERMISSIONS: list[tuple[str, PermissionCategory, int, str]] = [
    ("dashboard.view", _GENERAL, 1, "View Dashboard"),
    ("customers.view", _OPERATIONS, 10, "View Customers"),
    ("customers.create", _OPERATIONS, 11, "Create Customer"),
    ("customers.update", _OPERATIONS, 12, "Update Customers"),
    ("customers.delete", _OPERATIONS, 13, "Delete Customers"),
    ("customers.export", _OPERATIONS, 14, "Export Customers"),
    ("vehicles.view", _OPERATIONS, 20, "View Vehicles"),
    ("vehicles.create", _OPERATIONS, 21, "Create Vehicle"),
    ("vehicles.update", _OPERATIONS, 22, "Update Vehicles"),
    ("vehicles.delete", _OPERATIONS, 23, "Delete Vehicles"),
    ("work_orders.view", _OPERATIONS, 30, "View Work Orders"),
    ("work_orders.create", _OPERATIONS, 31, "Create Work Order"),
    ("work_orders.update", _OPERATIONS, 32, "Update Work Orders"),
    ("work_orders.delete", _OPERATIONS, 33, "Delete Work Orders"),
    ("work_orders.cancel", _OPERATIONS, 34, "Cancel Work Orders"),
    ("work_orders.complete", _OPERATIONS, 35, "Complete Work Orders"),
    ("work_orders.export", _OPERATIONS, 36, "Export Work Orders"),
    ("invoices.view", _FINANCIAL, 40, "View Invoices"),
    ("invoices.create", _FINANCIAL, 41, "Create Invoice"),
    ("invoices.update", _FINANCIAL, 42, "Update Invoices"),
    ("invoices.delete", _FINANCIAL, 43, "Delete Invoices"),
    ("invoices.print", _FINANCIAL, 44, "Print Invoices"),
    ("invoices.export", _FINANCIAL, 45, "Export Invoices"),
    ("invoices.void", _FINANCIAL, 46, "Void Invoices"),
    ("inventory.view", _OPERATIONS, 50, "View Inventory"),
    ("inventory.create", _OPERATIONS, 51, "Create Spare Part"),
    ("inventory.update", _OPERATIONS, 52, "Update Inventory"),
    ("inventory.delete", _OPERATIONS, 53, "Delete Spare Parts"),
    ("inventory.adjust_stock", _OPERATIONS, 54, "Adjust Stock"),
    ("inventory.export", _OPERATIONS, 55, "Export Inventory"),
    ("expenses.view", _FINANCIAL, 60, "View Expenses"),
    ("expenses.create", _FINANCIAL, 61, "Create Expense"),
    ("expenses.update", _FINANCIAL, 62, "Update Expenses"),
    ("expenses.delete", _FINANCIAL, 63, "Delete Expenses"),
    ("expenses.approve", _FINANCIAL, 64, "Approve Expenses"),
    ("expenses.export", _FINANCIAL, 65, "Export Expenses"),
    ("salaries.view", _FINANCIAL, 70, "View Salaries"),
    ("salaries.create", _FINANCIAL, 71, "Create Salary"),
    ("salaries.update", _FINANCIAL, 72, "Update Salaries"),
    ("salaries.delete", _FINANCIAL, 73, "Delete Salaries"),
    ("salaries.approve", _FINANCIAL, 74, "Approve Salaries"),
    ("salaries.export", _FINANCIAL, 75, "Export Salaries"),
    ("technicians.view", _OPERATIONS, 80, "View Technicians"),
    ("technicians.create", _OPERATIONS, 81, "Create Technician"),
    ("technicians.update", _OPERATIONS, 82, "Update Technicians"),
    ("technicians.delete", _OPERATIONS, 83, "Delete Technicians"),
    ("technicians.view_performance", _OPERATIONS, 84, "View Technician Performance"),
    ("technicians.manage_assignments", _OPERATIONS, 85, "Manage Technician Assignments"),
    ("reports.view", _REPORTS, 90, "View Reports"),
    ("reports.export", _REPORTS, 91, "Export Reports"),
    ("reports.financial", _REPORTS, 92, "Financial Reports"),
    ("reports.operations", _REPORTS, 93, "Operations Reports"),
    ("reports.performance", _REPORTS, 94, "Performance Reports"),
    ("settings.view", _ADMINISTRATION, 100, "View Settings"),
    ("settings.update", _ADMINISTRATION, 101, "Update Settings"),
    ("settings.manage_workshop", _ADMINISTRATION, 102, "Manage Workshop"),
    ("settings.manage_tax", _ADMINISTRATION, 103, "Manage Tax"),
    ("users.view", _ADMINISTRATION, 110, "View Users"),
    ("users.create", _ADMINISTRATION, 111, "Create User"),
    ("users.update", _ADMINISTRATION, 112, "Update Users"),
    ("users.delete", _ADMINISTRATION, 113, "Delete Users"),
    ("users.manage_roles", _ADMINISTRATION, 114, "Manage User Roles"),
    ("users.manage_permissions", _ADMINISTRATION, 115, "Manage User Permissions"),
    ("users.change_password", _ADMINISTRATION, 116, "Change User Password"),
    ("roles.view", _ADMINISTRATION, 120, "View Roles"),
    ("roles.create", _ADMINISTRATION, 121, "Create Role"),
    ("roles.update", _ADMINISTRATION, 122, "Update Roles"),
    ("roles.delete", _ADMINISTRATION, 123, "Delete Roles"),
    ("roles.manage_permissions", _ADMINISTRATION, 124, "Manage Role Permissions"),
    ("audit_logs.view", _ADMINISTRATION, 130, "View Audit Logs"),
]

# Admin holds no explicit links; the super-role bypass grants the whole catalog.
SYSTEM_ROLE_DEFAULTS: dict[SystemRole, tuple[str, frozenset[str]]] = {
    SystemRole.ADMIN: ("Administrator", frozenset()),
    SystemRole.CUSTOMER_SERVICE: (
        "Customer Service",
        frozenset({
            "dashboard.view",
            "customers.view",
            "customers.create",
            "customers.update",
            "customers.export",
            "vehicles.view",
            "vehicles.create",
            "vehicles.update",
            "work_orders.view",
            "work_orders.create",
            "work_orders.update",
            "invoices.view",
            "invoices.create",
            "invoices.print",
            "inventory.view",
            "expenses.view",
            "technicians.view",
            "reports.view",
        }),
    ),
    SystemRole.RECEPTIONIST: (
        "Receptionist",
        frozenset({
            "dashboard.view",
            "customers.view",
            "customers.create",
            "vehicles.view",
            "work_orders.view",
            "work_orders.create",
            "invoices.view",
            "inventory.view",
        }),
    ),
}


def permission_id_for(key: str) -> UUID:
    """Stable catalog id for key, identical across databases and tests."""
    return uuid5(NAMESPACE_URL, f"garage-rbac:permission:{key}")


def build_seed_catalog() -> list[Permission]:
    """Catalog entries for SEED_PERMISSIONS."""
    return [
        Permission(
            id=permission_id_for(key),
            key=PermissionKey(key),
            category=category,
            display_order=order,
            name_en=name,
        )
        for key, category, order, name in SEED_PERMISSIONS
    ]


class PermissionCatalog:
    """Lookup over the active catalog entries by id and by key."""

    def __init__(self, permissions: Iterable[Permission]) -> None:
        active = sorted(
            (p for p in permissions if p.is_active),
            key=lambda p: (CATEGORY_ORDER[p.category], p.display_order, p.key),
        )
        self._entries = active
        self._by_id: dict[UUID, Permission] = {p.id: p for p in active}
        self._by_key: dict[str, Permission] = {p.key: p for p in active}

    def key_for(self, permission_id: UUID | None) -> PermissionKey | None:
        """Key for id, or None when the id has no active entry."""
        entry = self._by_id.get(permission_id) if permission_id is not None else None
        return entry.key if entry else None

    def get(self, key: str) -> Permission | None:
        return self._by_key.get(key)

    def get_by_id(self, permission_id: UUID) -> Permission | None:
        return self._by_id.get(permission_id)

    @property
    def keys(self) -> frozenset[PermissionKey]:
        return frozenset(p.key for p in self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._by_key

    def __iter__(self) -> Iterator[Permission]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
