"""Permission resolver - computes a user's effective permission set.

Effective permissions are ``(role permissions | grants) - revocations``:

* roles only count while active, and only for keys present in the catalog;
* holding the super-role (an active system role with the super-role key)
  returns the whole catalog and ignores overrides;
* an override is inert once ``expires_at <= now`` and ignored when its
  permission id has no active catalog entry;
* when several active overrides exist for one permission, the most recently
  created one governs (larger id breaks ``created_at`` ties).

Every function here is pure: same inputs, same output, no I/O.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from garage_rbac.domain.catalog import PermissionCatalog
from garage_rbac.domain.entities import PermissionOverride, Role
from garage_rbac.domain.exceptions import ValidationError
from garage_rbac.domain.value_objects import SUPER_ROLE_KEY, PermissionKey

logger = logging.getLogger(__name__)


class PermissionSource(StrEnum):
    """Why a key is (or is not) in the effective set."""

    SUPER_ROLE = "super_role"
    ROLE = "role"
    GRANT = "grant"
    REVOCATION = "revocation"


@dataclass(frozen=True)
class Resolution:
    """Full result of resolving one user."""

    user_id: str
    permissions: frozenset[PermissionKey]
    role_keys: frozenset[str]
    is_super_role: bool = False
    sources: dict[PermissionKey, PermissionSource] = field(default_factory=dict)
    next_expiry: datetime | None = None
    tenant_id: UUID | None = None


def resolve(
    user_id: str,
    roles: Iterable[Role] | None,
    overrides: Iterable[PermissionOverride],
    now: datetime,
    catalog: PermissionCatalog,
    *,
    super_role_key: str = SUPER_ROLE_KEY,
) -> Resolution:
    """Resolve roles and overrides into a Resolution.

    Raises ValidationError only for unusable inputs (missing user id, unknown
    role set, naive ``now``). Bad override rows are skipped, never raised.
    """
    if not user_id:
        raise ValidationError("user_id is required")
    if roles is None:
        raise ValidationError(f"Role set for user {user_id} could not be determined")
    if now.tzinfo is None:
        raise ValidationError("now must be timezone-aware")

    active_roles = [r for r in roles if r.is_active]
    role_keys = frozenset(r.key for r in active_roles)
    tenant_ids = {r.tenant_id for r in active_roles}
    if len(tenant_ids) > 1:
        logger.warning(
            "User %s holds active roles in %d tenants: %s",
            user_id,
            len(tenant_ids),
            sorted(str(t) for t in tenant_ids),
        )
    tenant_id = active_roles[0].tenant_id if active_roles else None

    if any(r.key == super_role_key and r.is_system_role for r in active_roles):
        everything = catalog.keys
        return Resolution(
            user_id=user_id,
            permissions=everything,
            role_keys=role_keys,
            is_super_role=True,
            sources=dict.fromkeys(everything, PermissionSource.SUPER_ROLE),
            tenant_id=tenant_id,
        )

    sources: dict[PermissionKey, PermissionSource] = {}
    for role in active_roles:
        for key in role.permissions:
            if key in catalog:
                sources[catalog.get(key).key] = PermissionSource.ROLE
            else:
                logger.debug("Role %s references unknown permission %s", role.key, key)
    base = set(sources)

    active, next_expiry = _active_overrides(user_id, overrides, now, catalog)
    governing = _latest_per_permission(active)

    grants: set[PermissionKey] = set()
    revocations: set[PermissionKey] = set()
    for override in governing:
        key = catalog.key_for(override.permission_id)
        (grants if override.is_granted else revocations).add(key)

    effective = (base | grants) - revocations

    for key in grants - base:
        sources[key] = PermissionSource.GRANT
    for key in revocations:
        sources[key] = PermissionSource.REVOCATION

    return Resolution(
        user_id=user_id,
        permissions=frozenset(effective),
        role_keys=role_keys,
        sources=sources,
        next_expiry=next_expiry,
        tenant_id=tenant_id,
    )


def resolve_effective_permissions(
    user_id: str,
    roles: Iterable[Role] | None,
    overrides: Iterable[PermissionOverride],
    now: datetime,
    catalog: PermissionCatalog,
    *,
    super_role_key: str = SUPER_ROLE_KEY,
) -> frozenset[PermissionKey]:
    """Effective permission keys for user at ``now``."""
    return resolve(
        user_id, roles, overrides, now, catalog, super_role_key=super_role_key
    ).permissions


def explain_permissions(
    user_id: str,
    roles: Iterable[Role] | None,
    overrides: Iterable[PermissionOverride],
    now: datetime,
    catalog: PermissionCatalog,
    *,
    super_role_key: str = SUPER_ROLE_KEY,
) -> dict[PermissionKey, PermissionSource]:
    """Per-key origin of the decision, including revoked keys."""
    return resolve(
        user_id, roles, overrides, now, catalog, super_role_key=super_role_key
    ).sources


def _active_overrides(
    user_id: str,
    overrides: Iterable[PermissionOverride],
    now: datetime,
    catalog: PermissionCatalog,
) -> tuple[list[PermissionOverride], datetime | None]:
    active: list[PermissionOverride] = []
    next_expiry: datetime | None = None
    for override in overrides:
        if override.user_id != user_id:
            logger.warning(
                "Ignoring override %s: belongs to %s, not %s",
                override.id,
                override.user_id,
                user_id,
            )
            continue
        try:
            is_active = override.is_active_at(now)
        except TypeError:
            logger.warning("Ignoring override %s: naive expires_at", override.id)
            continue
        if not is_active:
            continue
        if catalog.key_for(override.permission_id) is None:
            logger.debug(
                "Ignoring override %s: permission %s not in catalog",
                override.id,
                override.permission_id,
            )
            continue
        active.append(override)
        if override.expires_at is not None and (
            next_expiry is None or override.expires_at < next_expiry
        ):
            next_expiry = override.expires_at
    return active, next_expiry


def _latest_per_permission(
    overrides: list[PermissionOverride],
) -> list[PermissionOverride]:
    latest: dict[UUID, PermissionOverride] = {}
    for override in overrides:
        current = latest.get(override.permission_id)
        if current is None:
            latest[override.permission_id] = override
            continue
        logger.warning(
            "Duplicate active overrides for user %s permission %s",
            override.user_id,
            override.permission_id,
        )
        if (override.created_at, override.id) > (current.created_at, current.id):
            latest[override.permission_id] = override
    return list(latest.values())
