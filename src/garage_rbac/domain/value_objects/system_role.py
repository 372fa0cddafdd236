"""System roles seeded for every tenant."""

from enum import StrEnum


class SystemRole(StrEnum):
    """Fixed, non-deletable roles."""

    ADMIN = "admin"
    CUSTOMER_SERVICE = "customer_service"
    RECEPTIONIST = "receptionist"


SUPER_ROLE_KEY = SystemRole.ADMIN.value
