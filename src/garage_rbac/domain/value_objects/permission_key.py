"""Permission keys - validated ``resource.action`` identifiers."""

from enum import StrEnum

from garage_rbac.domain.exceptions import ValidationError


class Resource(StrEnum):
    """Resources that can be authorized."""

    DASHBOARD = "dashboard"
    CUSTOMERS = "customers"
    VEHICLES = "vehicles"
    WORK_ORDERS = "work_orders"
    INVOICES = "invoices"
    INVENTORY = "inventory"
    EXPENSES = "expenses"
    SALARIES = "salaries"
    TECHNICIANS = "technicians"
    REPORTS = "reports"
    SETTINGS = "settings"
    USERS = "users"
    ROLES = "roles"
    AUDIT_LOGS = "audit_logs"


class Action(StrEnum):
    """Actions that can be performed on a resource."""

    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    EXPORT = "export"
    PRINT = "print"
    APPROVE = "approve"
    CANCEL = "cancel"
    COMPLETE = "complete"
    VOID = "void"
    ADJUST_STOCK = "adjust_stock"
    VIEW_PERFORMANCE = "view_performance"
    MANAGE_ASSIGNMENTS = "manage_assignments"
    FINANCIAL = "financial"
    OPERATIONS = "operations"
    PERFORMANCE = "performance"
    MANAGE_WORKSHOP = "manage_workshop"
    MANAGE_TAX = "manage_tax"
    MANAGE_ROLES = "manage_roles"
    MANAGE_PERMISSIONS = "manage_permissions"
    CHANGE_PASSWORD = "change_password"


# Any one of these on top of ``view`` counts as "can edit" for coarse checks.
EDIT_ACTIONS = (Action.CREATE, Action.UPDATE, Action.DELETE)


def _split(value: object) -> tuple[Resource, Action]:
    if not isinstance(value, str) or value.count(".") != 1:
        raise ValidationError(f"Invalid permission key: {value!r}")
    resource, action = value.split(".")
    try:
        return Resource(resource), Action(action)
    except ValueError:
        raise ValidationError(f"Invalid permission key: {value!r}") from None


class PermissionKey(str):
    """Validated ``resource.action`` string.

    Subclasses ``str`` so keys hash, compare and serialize exactly like the
    plain strings stored in the database and sent over the API.
    """

    __slots__ = ()

    def __new__(cls, value: str) -> "PermissionKey":
        resource, action = _split(value)
        return super().__new__(cls, f"{resource.value}.{action.value}")

    @classmethod
    def of(cls, resource: Resource | str, action: Action | str) -> "PermissionKey":
        """Build key from its two parts."""
        return cls(f"{resource}.{action}")

    @classmethod
    def parse(cls, value: str, allow_coarse: bool = False) -> "PermissionKey":
        """Parse key; with allow_coarse a bare resource means ``resource.view``."""
        if allow_coarse and isinstance(value, str) and "." not in value:
            value = f"{value}.{Action.VIEW.value}"
        return cls(value)

    @property
    def resource(self) -> Resource:
        return Resource(self.split(".", 1)[0])

    @property
    def action(self) -> Action:
        return Action(self.split(".", 1)[1])

    def __repr__(self) -> str:
        return f"PermissionKey({str(self)!r})"
