"""Authorization guard - point-of-use permission checks.

Accepts either an AuthContext or a bare effective set. Keys may be fine
(``invoices.update``) or coarse (``invoices``, meaning ``invoices.view``).
"""

import logging
from collections.abc import Iterable, Set
from datetime import UTC, datetime

from garage_rbac.domain.exceptions import ForbiddenError, ValidationError
from garage_rbac.domain.value_objects import EDIT_ACTIONS, AuthContext, PermissionKey

logger = logging.getLogger(__name__)

Subject = AuthContext | Set[str]


def can(
    subject: Subject,
    key: str,
    *,
    require_edit: bool = False,
    now: datetime | None = None,
) -> bool:
    """True if subject holds key.

    With ``require_edit`` the subject must also hold any of create, update or
    delete on the same resource. Unknown keys and expired contexts are denied.
    """
    permission = _normalize(key)
    if permission is None:
        return False

    if isinstance(subject, AuthContext):
        if subject.is_expired(now or datetime.now(UTC)):
            logger.debug("Auth context for %s expired; denying %s", subject.user_id, permission)
            return False
        if subject.is_super_role:
            return True
        granted: Set[str] = subject.permissions
    else:
        granted = subject

    if permission not in granted:
        return False
    if require_edit:
        return any(
            PermissionKey.of(permission.resource, action) in granted
            for action in EDIT_ACTIONS
        )
    return True


def can_any(subject: Subject, keys: Iterable[str], *, now: datetime | None = None) -> bool:
    """True if at least one key is held. Empty input is False."""
    return any(can(subject, key, now=now) for key in keys)


def can_all(subject: Subject, keys: Iterable[str], *, now: datetime | None = None) -> bool:
    """True only if every key is held. Empty input is True."""
    return all(can(subject, key, now=now) for key in keys)


def require_permission(
    subject: Subject,
    key: str,
    *,
    require_edit: bool = False,
    now: datetime | None = None,
) -> None:
    """Raise ForbiddenError unless subject holds key."""
    if can(subject, key, require_edit=require_edit, now=now):
        return
    user_id = subject.user_id if isinstance(subject, AuthContext) else None
    logger.info("Denied %s%s to user %s", key, " (edit)" if require_edit else "", user_id)
    raise ForbiddenError(permission_key=str(key))


def _normalize(key: str) -> PermissionKey | None:
    try:
        return PermissionKey.parse(key, allow_coarse=True)
    except ValidationError:
        logger.warning("Unknown permission key %r", key)
        return None
