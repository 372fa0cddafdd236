"""Permission checker port - loads and caches a user's AuthContext."""

from collections.abc import Iterable
from typing import Protocol

from garage_rbac.domain.value_objects import AuthContext


class PermissionChecker(Protocol):
    """Port for resolving users into AuthContexts and checking permissions."""

    async def load_context(self, user_id: str) -> AuthContext: ...

    async def check(self, user_id: str, permission: str) -> bool: ...

    def on_role_or_override_changed(self, user_id: str) -> None: ...

    def on_roles_changed(self, user_ids: Iterable[str]) -> None: ...

    def on_sign_out(self, user_id: str) -> None: ...
