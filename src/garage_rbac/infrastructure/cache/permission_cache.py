"""Per-user cache of resolved AuthContexts."""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from garage_rbac.domain.value_objects import AuthContext


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class _Entry:
    context: AuthContext
    stored_at: datetime


class PermissionCache:
    """TTL cache keyed by user id.

    An entry is served only while younger than ``ttl_seconds`` and while its
    context has not reached its own ``expires_at``.
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def get(self, user_id: str) -> AuthContext | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is None:
                return None
            if now - entry.stored_at >= self._ttl or entry.context.is_expired(now):
                del self._entries[user_id]
                return None
            return entry.context

    def set(self, user_id: str, context: AuthContext) -> None:
        if self._ttl <= timedelta(0):
            return
        with self._lock:
            self._entries[user_id] = _Entry(context=context, stored_at=self._clock())

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        """Drop stale entries. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            stale = [
                user_id
                for user_id, entry in self._entries.items()
                if now - entry.stored_at >= self._ttl or entry.context.is_expired(now)
            ]
            for user_id in stale:
                del self._entries[user_id]
        return len(stale)

    def __contains__(self, user_id: object) -> bool:
        return self.get(user_id) is not None if isinstance(user_id, str) else False

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
