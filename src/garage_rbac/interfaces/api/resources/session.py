"""Session resource."""

import falcon.asgi

from garage_rbac.application.ports import PermissionChecker
from garage_rbac.interfaces.api.resources.common import current_user


class SignOutResource:
    """POST /v1/session/sign-out - drop the caller's cached permissions."""

    def __init__(self, permission_checker: PermissionChecker) -> None:
        self._checker = permission_checker

    async def on_post(self, req: falcon.asgi.Request, resp: falcon.asgi.Response) -> None:
        user = current_user(req)
        self._checker.on_sign_out(user.user_id)
        resp.status = falcon.HTTP_204
