"""Application ports - interfaces for external adapters."""

from garage_rbac.application.ports.permission_checker import PermissionChecker
from garage_rbac.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "PermissionChecker",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
