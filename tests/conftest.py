"""Pytest fixtures for garage-rbac tests."""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import replace
from datetime import UTC, datetime
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from garage_rbac.domain.catalog import build_seed_catalog, permission_id_for
from garage_rbac.domain.entities import (
    Permission,
    PermissionOverride,
    Role,
    UserRoleAssignment,
)
from garage_rbac.domain.value_objects import (
    CATEGORY_ORDER,
    AuthContext,
    PermissionCategory,
    PermissionKey,
)

TENANT_ID = UUID("00000000-0000-0000-0000-00000000a001")
OTHER_TENANT_ID = UUID("00000000-0000-0000-0000-00000000b002")
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


# --- Fake repositories ---


class FakePermissionRepository:
    """In-memory permission catalog, seeded with the default catalog."""

    def __init__(self, permissions: Iterable[Permission] | None = None) -> None:
        self._by_id: dict[UUID, Permission] = {}
        for p in build_seed_catalog() if permissions is None else permissions:
            self.add(p)

    def add(self, permission: Permission) -> None:
        self._by_id[permission.id] = permission

    def deactivate(self, key: str) -> None:
        permission = self._by_id[permission_id_for(key)]
        self._by_id[permission.id] = replace(permission, is_active=False)

    async def get_by_id(self, permission_id: UUID) -> Permission | None:
        return self._by_id.get(permission_id)

    async def get_by_key(self, key: str) -> Permission | None:
        return next((p for p in self._by_id.values() if p.key == key), None)

    async def list_active(
        self, category: PermissionCategory | None = None
    ) -> list[Permission]:
        items = [
            p
            for p in self._by_id.values()
            if p.is_active and (category is None or p.category == category)
        ]
        items.sort(key=lambda p: (CATEGORY_ORDER[p.category], p.display_order, p.key))
        return items


class FakeRoleRepository:
    """In-memory role repository with role_permission links.

    Reads return copies with ``permissions`` computed from active links, as the
    SQL repository does.
    """

    def __init__(self, permissions: FakePermissionRepository) -> None:
        self._permissions = permissions
        self._by_id: dict[UUID, Role] = {}
        self._links: dict[UUID, set[UUID]] = {}

    def add_role(self, role: Role, permission_keys: Iterable[str] = ()) -> Role:
        self._by_id[role.id] = replace(role, permissions=frozenset())
        self._links[role.id] = {permission_id_for(k) for k in permission_keys}
        return self._read(role.id)

    def _read(self, role_id: UUID) -> Role | None:
        role = self._by_id.get(role_id)
        if role is None:
            return None
        keys = frozenset(
            p.key
            for pid in self._links.get(role_id, set())
            if (p := self._permissions._by_id.get(pid)) and p.is_active
        )
        return replace(role, permissions=keys)

    async def get_by_id(self, role_id: UUID) -> Role | None:
        return self._read(role_id)

    async def get_by_key(self, tenant_id: UUID, key: str) -> Role | None:
        for role in self._by_id.values():
            if role.tenant_id == tenant_id and role.key == key:
                return self._read(role.id)
        return None

    async def list_by_tenant(self, tenant_id: UUID) -> list[Role]:
        roles = [self._read(r.id) for r in self._by_id.values() if r.tenant_id == tenant_id]
        return sorted(roles, key=lambda r: (not r.is_system_role, r.name))

    async def create(self, role: Role) -> Role:
        self._by_id[role.id] = replace(role, permissions=frozenset())
        self._links.setdefault(role.id, set())
        return role

    async def update(self, role: Role) -> None:
        self._by_id[role.id] = replace(role, permissions=frozenset())

    async def set_permissions(
        self,
        role_id: UUID,
        permission_ids: list[UUID],
        granted_by: str | None = None,
    ) -> None:
        self._links[role_id] = set(permission_ids)

    async def delete(self, role_id: UUID) -> None:
        self._by_id.pop(role_id, None)
        self._links.pop(role_id, None)


class FakeUserRoleRepository:
    """In-memory user_role repository."""

    def __init__(self, roles: FakeRoleRepository) -> None:
        self._roles = roles
        self._by_pair: dict[tuple[str, UUID], UserRoleAssignment] = {}

    def assign(self, user_id: str, role_id: UUID) -> UserRoleAssignment:
        assignment = UserRoleAssignment(
            id=uuid4(), user_id=user_id, role_id=role_id, created_at=NOW
        )
        self._by_pair[(user_id, role_id)] = assignment
        return assignment

    async def list_roles_for_user(self, user_id: str) -> list[Role]:
        roles = [
            self._roles._read(role_id)
            for (uid, role_id) in self._by_pair
            if uid == user_id
        ]
        return [r for r in roles if r is not None and r.is_active]

    async def get(self, user_id: str, role_id: UUID) -> UserRoleAssignment | None:
        return self._by_pair.get((user_id, role_id))

    async def list_user_ids_for_role(self, role_id: UUID) -> list[str]:
        return sorted(uid for (uid, rid) in self._by_pair if rid == role_id)

    async def create(self, assignment: UserRoleAssignment) -> UserRoleAssignment:
        self._by_pair[(assignment.user_id, assignment.role_id)] = assignment
        return assignment

    async def delete(self, user_id: str, role_id: UUID) -> None:
        self._by_pair.pop((user_id, role_id), None)

    async def delete_by_role(self, role_id: UUID) -> None:
        for pair in [p for p in self._by_pair if p[1] == role_id]:
            del self._by_pair[pair]


class FakeOverrideRepository:
    """In-memory permission_override repository, unique per (user, permission)."""

    def __init__(self) -> None:
        self._by_pair: dict[tuple[str, UUID], PermissionOverride] = {}

    def add(self, override: PermissionOverride) -> PermissionOverride:
        self._by_pair[(override.user_id, override.permission_id)] = override
        return override

    async def list_by_user(self, user_id: str) -> list[PermissionOverride]:
        return [o for (uid, _), o in self._by_pair.items() if uid == user_id]

    async def get_for_permission(
        self, user_id: str, permission_id: UUID
    ) -> PermissionOverride | None:
        return self._by_pair.get((user_id, permission_id))

    async def upsert(self, override: PermissionOverride) -> PermissionOverride:
        existing = self._by_pair.get((override.user_id, override.permission_id))
        if existing:
            override = replace(override, id=existing.id)
        self._by_pair[(override.user_id, override.permission_id)] = override
        return override

    async def delete(self, user_id: str, permission_id: UUID) -> None:
        self._by_pair.pop((user_id, permission_id), None)


class FakeUnitOfWork:
    """In-memory Unit of Work with fake repositories."""

    def __init__(self) -> None:
        self.permissions = FakePermissionRepository()
        self.roles = FakeRoleRepository(self.permissions)
        self.user_roles = FakeUserRoleRepository(self.roles)
        self.overrides = FakeOverrideRepository()
        self.commits = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


def make_factory(uow: FakeUnitOfWork):
    """Factory yielding the same UoW on every call, committing on clean exit."""

    @asynccontextmanager
    async def _factory() -> AsyncIterator[FakeUnitOfWork]:
        yield uow
        await uow.commit()

    return _factory


def make_role(
    key: str,
    *,
    tenant_id: UUID = TENANT_ID,
    is_system_role: bool = False,
    is_active: bool = True,
    permissions: Iterable[str] = (),
) -> Role:
    return Role(
        id=uuid4(),
        tenant_id=tenant_id,
        key=key,
        name=key.replace("_", " ").title(),
        is_system_role=is_system_role,
        is_active=is_active,
        permissions=frozenset(PermissionKey(k) for k in permissions),
        created_at=NOW,
        updated_at=NOW,
    )


def make_override(
    user_id: str,
    key: str,
    is_granted: bool,
    *,
    created_at: datetime = NOW,
    expires_at: datetime | None = None,
    override_id: UUID | None = None,
) -> PermissionOverride:
    return PermissionOverride(
        id=override_id or uuid4(),
        user_id=user_id,
        permission_id=permission_id_for(key),
        is_granted=is_granted,
        created_at=created_at,
        expires_at=expires_at,
    )


def make_actor(
    *keys: str,
    user_id: str = "admin-1",
    tenant_id: UUID | None = TENANT_ID,
    is_super_role: bool = False,
) -> AuthContext:
    return AuthContext(
        user_id=user_id,
        tenant_id=tenant_id,
        role_keys=frozenset({"admin"} if is_super_role else set()),
        permissions=frozenset(PermissionKey(k) for k in keys),
        is_super_role=is_super_role,
    )


# --- Fixtures ---


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Fresh in-memory UnitOfWork for each test."""
    return FakeUnitOfWork()


@pytest.fixture
def uow_factory(uow: FakeUnitOfWork):
    """Factory returning async context manager with the test's FakeUnitOfWork."""
    return make_factory(uow)


@pytest.fixture
def mock_permission_checker():
    """MagicMock for the PermissionChecker invalidation hooks."""
    return MagicMock()


@pytest.fixture
def admin() -> AuthContext:
    """Super-role actor in TENANT_ID."""
    return make_actor(is_super_role=True)
