"""Unit tests for GarageRBACPermissionChecker."""

import asyncio
from datetime import timedelta

import pytest

from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.infrastructure.cache.permission_cache import PermissionCache
from garage_rbac.infrastructure.permission.permission_checker import (
    GarageRBACPermissionChecker,
)

from tests.conftest import NOW, TENANT_ID, FakeUnitOfWork, make_factory, make_override, make_role

USER = "user-u"


class FakeClock:
    def __init__(self) -> None:
        self.now = NOW

    def __call__(self):
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> FakeUnitOfWork:
    uow = FakeUnitOfWork()
    role = uow.roles.add_role(
        make_role("receptionist", is_system_role=True),
        ["customers.view", "customers.create", "work_orders.view"],
    )
    uow.user_roles.assign(USER, role.id)
    return uow


@pytest.fixture
def checker(store, clock) -> GarageRBACPermissionChecker:
    return GarageRBACPermissionChecker(
        make_factory(store),
        cache=PermissionCache(ttl_seconds=300, clock=clock),
        clock=clock,
    )


def _block_reads(store: FakeUnitOfWork) -> tuple[asyncio.Event, asyncio.Event]:
    """Make the role read wait until released; returns (started, release)."""
    started, release = asyncio.Event(), asyncio.Event()
    original = store.user_roles.list_roles_for_user

    async def slow(user_id: str):
        started.set()
        await release.wait()
        return await original(user_id)

    store.user_roles.list_roles_for_user = slow
    return started, release


@pytest.mark.asyncio
async def test_load_context_resolves_roles_and_overrides(store, checker) -> None:
    store.overrides.add(make_override(USER, "customers.create", False))
    store.overrides.add(make_override(USER, "work_orders.create", True))

    ctx = await checker.load_context(USER)

    assert ctx.permissions == {"customers.view", "work_orders.view", "work_orders.create"}
    assert ctx.role_keys == {"receptionist"}
    assert ctx.expires_at == NOW + timedelta(seconds=300)


@pytest.mark.asyncio
async def test_load_context_is_cached_until_invalidated(store, checker) -> None:
    first = await checker.load_context(USER)
    store.overrides.add(make_override(USER, "invoices.view", True))

    assert await checker.load_context(USER) is first
    assert not await checker.check(USER, "invoices.view")

    checker.on_role_or_override_changed(USER)
    assert await checker.check(USER, "invoices.view")


@pytest.mark.asyncio
async def test_context_expires_with_earliest_override(store, checker, clock) -> None:
    expiry = NOW + timedelta(minutes=1)
    store.overrides.add(make_override(USER, "invoices.view", True, expires_at=expiry))

    ctx = await checker.load_context(USER)
    assert ctx.expires_at == expiry
    assert await checker.check(USER, "invoices.view")

    clock.now = expiry
    assert not await checker.check(USER, "invoices.view")
    assert await checker.check(USER, "customers.view")


@pytest.mark.asyncio
async def test_zero_ttl_never_expires_context_immediately(store, clock) -> None:
    checker = GarageRBACPermissionChecker(
        make_factory(store), cache=PermissionCache(ttl_seconds=0, clock=clock), clock=clock
    )
    assert await checker.check(USER, "customers.view")


@pytest.mark.asyncio
async def test_on_roles_changed_invalidates_every_user(store, checker) -> None:
    await checker.load_context(USER)
    role = await store.roles.get_by_key(TENANT_ID, "receptionist")
    await store.roles.set_permissions(role.id, [])

    checker.on_roles_changed([USER, "nobody"])

    assert (await checker.load_context(USER)).permissions == frozenset()


@pytest.mark.asyncio
async def test_check_denies_empty_user_id(checker) -> None:
    assert not await checker.check("", "dashboard.view")
    with pytest.raises(ValidationError):
        await checker.load_context("")


@pytest.mark.asyncio
async def test_change_during_load_is_not_cached(store, checker) -> None:
    started, release = _block_reads(store)
    task = asyncio.create_task(checker.load_context(USER))
    await started.wait()

    store.overrides.add(make_override(USER, "customers.view", False))
    checker.on_role_or_override_changed(USER)
    release.set()
    await task

    assert USER not in checker._cache
    assert not await checker.check(USER, "customers.view")


@pytest.mark.asyncio
async def test_sign_out_during_load_returns_deny_all(store, checker) -> None:
    started, release = _block_reads(store)
    task = asyncio.create_task(checker.load_context(USER))
    await started.wait()

    checker.on_sign_out(USER)
    release.set()
    ctx = await task

    assert ctx.permissions == frozenset()
    assert not ctx.is_super_role


@pytest.mark.asyncio
async def test_cancelled_load_propagates_and_caches_nothing(store, checker) -> None:
    started, _ = _block_reads(store)
    task = asyncio.create_task(checker.load_context(USER))
    await started.wait()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert USER not in checker._cache


@pytest.mark.asyncio
async def test_without_cache_always_reads_store(store, clock) -> None:
    checker = GarageRBACPermissionChecker(make_factory(store), clock=clock)
    assert await checker.check(USER, "customers.view")
    store.overrides.add(make_override(USER, "customers.view", False))
    assert not await checker.check(USER, "customers.view")


def _counters(checker: GarageRBACPermissionChecker) -> tuple[dict, dict, dict]:
    return checker._in_flight, checker._generations, checker._sign_outs


@pytest.mark.asyncio
async def test_idle_invalidations_leave_no_counters(checker) -> None:
    for i in range(1000):
        checker.on_role_or_override_changed(f"user-{i}")
        checker.on_sign_out(f"gone-{i}")
    checker.on_roles_changed(f"bulk-{i}" for i in range(1000))

    assert _counters(checker) == ({}, {}, {})


@pytest.mark.asyncio
async def test_counters_are_dropped_after_racing_loads(store, checker) -> None:
    started, release = _block_reads(store)
    task = asyncio.create_task(checker.load_context(USER))
    await started.wait()

    checker.on_role_or_override_changed(USER)
    checker.on_sign_out(USER)
    assert checker._generations[USER] == 2
    assert checker._sign_outs[USER] == 1
    release.set()
    await task

    assert _counters(checker) == ({}, {}, {})


@pytest.mark.asyncio
async def test_counters_survive_until_last_concurrent_load_finishes(store, checker) -> None:
    started, release = _block_reads(store)
    first = asyncio.create_task(checker.load_context(USER))
    await started.wait()
    second = asyncio.create_task(checker.load_context(USER))
    await asyncio.sleep(0)
    assert checker._in_flight[USER] == 2

    checker.on_sign_out(USER)
    release.set()
    contexts = await asyncio.gather(first, second)

    assert all(ctx.permissions == frozenset() for ctx in contexts)
    assert _counters(checker) == ({}, {}, {})


@pytest.mark.asyncio
async def test_cancelled_load_releases_counters(store, checker) -> None:
    started, _ = _block_reads(store)
    task = asyncio.create_task(checker.load_context(USER))
    await started.wait()
    checker.on_role_or_override_changed(USER)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
    assert _counters(checker) == ({}, {}, {})
