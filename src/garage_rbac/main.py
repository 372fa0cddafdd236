"""Application entry point and composition root."""

import argparse
import asyncio
import logging
from uuid import UUID

import falcon.asgi

from garage_rbac import __version__
from garage_rbac.application.use_cases.override.delete_override import (
    DeletePermissionOverrideUseCase,
)
from garage_rbac.application.use_cases.override.set_override import (
    SetPermissionOverrideUseCase,
)
from garage_rbac.application.use_cases.permission.resolve_permissions import (
    ExplainPermissionsUseCase,
    ResolvePermissionsUseCase,
)
from garage_rbac.application.use_cases.role.assign_role import AssignRoleUseCase
from garage_rbac.application.use_cases.role.create_role import CreateRoleUseCase
from garage_rbac.application.use_cases.role.delete_role import DeleteRoleUseCase
from garage_rbac.application.use_cases.role.seed_system_roles import SeedSystemRolesUseCase
from garage_rbac.application.use_cases.role.set_role_permissions import (
    SetRolePermissionsUseCase,
)
from garage_rbac.application.use_cases.role.unassign_role import UnassignRoleUseCase
from garage_rbac.application.use_cases.role.update_role import UpdateRoleUseCase
from garage_rbac.config import Settings, get_settings
from garage_rbac.infrastructure.auth.keycloak_provider import KeycloakProvider
from garage_rbac.infrastructure.cache.permission_cache import PermissionCache
from garage_rbac.infrastructure.permission.permission_checker import (
    GarageRBACPermissionChecker,
)
from garage_rbac.infrastructure.persistence.postgres.connection import create_pool
from garage_rbac.infrastructure.persistence.postgres.unit_of_work import (
    create_uow_factory,
)
from garage_rbac.interfaces.api.errors import register_error_handlers
from garage_rbac.interfaces.api.middleware.auth import AuthMiddleware
from garage_rbac.interfaces.api.middleware.cors import CORSMiddleware
from garage_rbac.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from garage_rbac.interfaces.api.resources.health import HealthResource
from garage_rbac.interfaces.api.resources.permissions import (
    MyPermissionsResource,
    PermissionCatalogResource,
    PermissionCheckResource,
    UserOverrideResource,
    UserOverridesResource,
    UserPermissionsResource,
)
from garage_rbac.interfaces.api.resources.roles import (
    RolePermissionsResource,
    RoleResource,
    RolesResource,
    UserRoleResource,
    UserRolesResource,
)
from garage_rbac.interfaces.api.resources.session import SignOutResource

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def add_routes(
    app: falcon.asgi.App,
    uow_factory: type,
    permission_checker: GarageRBACPermissionChecker,
    health_resource: HealthResource,
    super_role_key: str,
) -> None:
    """Wire use cases and resources onto app."""
    resolve_permissions = ResolvePermissionsUseCase(
        unit_of_work_factory=uow_factory,
        super_role_key=super_role_key,
    )
    explain_permissions = ExplainPermissionsUseCase(resolve_permissions)
    set_override = SetPermissionOverrideUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )
    delete_override = DeletePermissionOverrideUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )
    create_role = CreateRoleUseCase(unit_of_work_factory=uow_factory)
    update_role = UpdateRoleUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )
    delete_role = DeleteRoleUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )
    set_role_permissions = SetRolePermissionsUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )
    assign_role = AssignRoleUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )
    unassign_role = UnassignRoleUseCase(
        unit_of_work_factory=uow_factory,
        permission_checker=permission_checker,
    )

    check_resource = PermissionCheckResource(permission_checker)

    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route("/v1/permissions", PermissionCatalogResource(uow_factory, permission_checker))
    app.add_route("/v1/permissions/check", check_resource)
    app.add_route("/v1/permissions/check-any", check_resource, suffix="any")
    app.add_route("/v1/me/permissions", MyPermissionsResource(permission_checker))
    app.add_route(
        "/v1/users/{user_id}/permissions",
        UserPermissionsResource(resolve_permissions, explain_permissions, permission_checker),
    )
    app.add_route(
        "/v1/users/{user_id}/overrides",
        UserOverridesResource(set_override, permission_checker),
    )
    app.add_route(
        "/v1/users/{user_id}/overrides/{permission_id}",
        UserOverrideResource(delete_override, permission_checker),
    )
    app.add_route("/v1/roles", RolesResource(create_role, uow_factory, permission_checker))
    app.add_route(
        "/v1/roles/{role_id}",
        RoleResource(update_role, delete_role, uow_factory, permission_checker),
    )
    app.add_route(
        "/v1/roles/{role_id}/permissions",
        RolePermissionsResource(set_role_permissions, permission_checker),
    )
    app.add_route(
        "/v1/users/{user_id}/roles",
        UserRolesResource(assign_role, permission_checker),
    )
    app.add_route(
        "/v1/users/{user_id}/roles/{role_id}",
        UserRoleResource(unassign_role, permission_checker),
    )
    app.add_route("/v1/session/sign-out", SignOutResource(permission_checker))


def create_garage_rbac_app():
    """Composition root - build Falcon app with all dependencies."""
    settings = get_settings()
    configure_logging(settings)
    pool = create_pool(settings.database_url)
    uow_factory = create_uow_factory(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None:
        logger.warning("KEYCLOAK_CLIENT_SECRET not set; all requests are unauthenticated")

    permission_checker = GarageRBACPermissionChecker(
        uow_factory,
        cache=PermissionCache(ttl_seconds=settings.permission_cache_ttl_seconds),
        super_role_key=settings.super_role_key,
    )

    cors_origins = [
        o.strip() for o in settings.cors_origins.split(",") if o.strip()
    ]
    app = falcon.asgi.App(
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(pool),
            AuthMiddleware(keycloak),
        ],
    )
    register_error_handlers(app)
    add_routes(
        app,
        uow_factory,
        permission_checker,
        HealthResource(pool),
        settings.super_role_key,
    )
    return app


async def seed_tenant(tenant_id: UUID, created_by: str | None = None) -> None:
    """Create the default system roles for a tenant."""
    settings = get_settings()
    pool = create_pool(settings.database_url)
    await pool.open()
    try:
        roles = await SeedSystemRolesUseCase(create_uow_factory(pool)).execute(
            tenant_id, created_by=created_by
        )
    finally:
        await pool.close()
    for role in roles:
        print(f"{role.key}\t{role.id}\t{len(role.permissions)} permissions")


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    app = create_garage_rbac_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(prog="garage-rbac")
    parser.add_argument("--version", action="version", version=f"garage-rbac v{__version__}")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("serve", help="Run the HTTP API")
    seed = sub.add_parser("seed-roles", help="Create system roles for a tenant")
    seed.add_argument("tenant_id", type=UUID)
    seed.add_argument("--created-by", default=None)
    args = parser.parse_args(argv)

    if args.command == "serve":
        run_server()
    elif args.command == "seed-roles":
        configure_logging(get_settings())
        asyncio.run(seed_tenant(args.tenant_id, args.created_by))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
