"""Permission checker implementation - resolves users from the store, with caching."""

import logging
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from garage_rbac.application.use_cases.permission.resolve_permissions import fetch_resolution
from garage_rbac.domain.exceptions import NotFoundError, ValidationError
from garage_rbac.domain.services import Resolution, can
from garage_rbac.domain.value_objects import SUPER_ROLE_KEY, AuthContext
from garage_rbac.infrastructure.cache.permission_cache import PermissionCache, utcnow

logger = logging.getLogger(__name__)


class GarageRBACPermissionChecker:
    """Loads roles, overrides and catalog for a user and resolves an AuthContext.

    While a load for a user is in flight, every invalidation bumps that user's
    generation and every sign-out bumps their sign-out count. A load only
    populates the cache if the generation it started with is still current,
    and a load that raced a sign-out returns a deny-all context instead of the
    fetched data. Counters are dropped once the user's last load finishes.
    """

    def __init__(
        self,
        unit_of_work_factory: type,
        cache: PermissionCache | None = None,
        super_role_key: str = SUPER_ROLE_KEY,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._super_role_key = super_role_key
        self._clock = clock
        self._in_flight: dict[str, int] = {}
        self._generations: dict[str, int] = {}
        self._sign_outs: dict[str, int] = {}

    async def load_context(self, user_id: str) -> AuthContext:
        """AuthContext for user, from cache when fresh."""
        if not user_id:
            raise ValidationError("user_id is required")

        if self._cache:
            cached = self._cache.get(user_id)
            if cached:
                return cached

        self._in_flight[user_id] = self._in_flight.get(user_id, 0) + 1
        generation = self._generations.get(user_id, 0)
        sign_outs = self._sign_outs.get(user_id, 0)
        now = self._clock()
        try:
            async with self._uow_factory() as uow:
                resolution = await fetch_resolution(
                    uow, user_id, now, super_role_key=self._super_role_key
                )
            signed_out = self._sign_outs.get(user_id, 0) != sign_outs
            unchanged = self._generations.get(user_id, 0) == generation
        finally:
            self._release(user_id)

        if signed_out:
            logger.info("User %s signed out while permissions were loading", user_id)
            return AuthContext.denied(user_id, resolution.tenant_id)

        context = self._to_context(resolution, now)
        if self._cache and unchanged:
            self._cache.set(user_id, context)
        return context

    async def check(self, user_id: str, permission: str) -> bool:
        """Check if user holds permission (fine or coarse key)."""
        try:
            context = await self.load_context(user_id)
        except (ValidationError, NotFoundError) as exc:
            logger.info("Denying %s to %s: %s", permission, user_id, exc)
            return False
        return can(context, permission, now=self._clock())

    def on_role_or_override_changed(self, user_id: str) -> None:
        if user_id in self._in_flight:
            self._generations[user_id] = self._generations.get(user_id, 0) + 1
        if self._cache:
            self._cache.invalidate(user_id)

    def on_roles_changed(self, user_ids: Iterable[str]) -> None:
        for user_id in user_ids:
            self.on_role_or_override_changed(user_id)

    def on_sign_out(self, user_id: str) -> None:
        if user_id in self._in_flight:
            self._sign_outs[user_id] = self._sign_outs.get(user_id, 0) + 1
        self.on_role_or_override_changed(user_id)

    def _release(self, user_id: str) -> None:
        remaining = self._in_flight.get(user_id, 0) - 1
        if remaining > 0:
            self._in_flight[user_id] = remaining
            return
        self._in_flight.pop(user_id, None)
        self._generations.pop(user_id, None)
        self._sign_outs.pop(user_id, None)

    def _to_context(self, resolution: Resolution, now: datetime) -> AuthContext:
        deadlines = [resolution.next_expiry]
        if self._cache and self._cache.ttl > timedelta(0):
            deadlines.append(now + self._cache.ttl)
        expires_at = min((d for d in deadlines if d is not None), default=None)
        return AuthContext(
            user_id=resolution.user_id,
            tenant_id=resolution.tenant_id,
            role_keys=resolution.role_keys,
            permissions=resolution.permissions,
            is_super_role=resolution.is_super_role,
            resolved_at=now,
            expires_at=expires_at,
        )
