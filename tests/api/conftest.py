"""Fixtures for API tests."""

import falcon.asgi
import pytest
from falcon.testing import TestClient

from garage_rbac.domain.catalog import SYSTEM_ROLE_DEFAULTS
from garage_rbac.domain.value_objects import SystemRole
from garage_rbac.infrastructure.permission.permission_checker import (
    GarageRBACPermissionChecker,
)
from garage_rbac.interfaces.api.errors import register_error_handlers
from garage_rbac.interfaces.api.middleware.auth import RequestUser
from garage_rbac.interfaces.api.resources.health import HealthResource
from garage_rbac.main import add_routes

from tests.conftest import FakeUnitOfWork, make_factory, make_role


class AuthBypassMiddleware:
    """Middleware that sets context.user from the X-Test-User header."""

    async def process_request(self, req, resp):
        user_id = req.get_header("X-Test-User")
        req.context.user = RequestUser(user_id=user_id) if user_id else None


@pytest.fixture
def store() -> FakeUnitOfWork:
    """Tenant with an admin (admin-1) and a receptionist (clerk-1)."""
    uow = FakeUnitOfWork()
    admin = uow.roles.add_role(make_role("admin", is_system_role=True))
    receptionist = uow.roles.add_role(
        make_role("receptionist", is_system_role=True),
        SYSTEM_ROLE_DEFAULTS[SystemRole.RECEPTIONIST][1],
    )
    uow.user_roles.assign("admin-1", admin.id)
    uow.user_roles.assign("clerk-1", receptionist.id)
    return uow


@pytest.fixture
def permission_checker(store) -> GarageRBACPermissionChecker:
    return GarageRBACPermissionChecker(make_factory(store))


@pytest.fixture
def app(store, permission_checker):
    """Falcon ASGI app with all API routes over the fake store."""
    app = falcon.asgi.App(middleware=[AuthBypassMiddleware()])
    register_error_handlers(app)
    add_routes(app, make_factory(store), permission_checker, HealthResource(), "admin")
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Falcon ASGI test client."""
    return TestClient(app)


ADMIN = {"X-Test-User": "admin-1"}
CLERK = {"X-Test-User": "clerk-1"}
