"""Auth middleware - extracts the user from a bearer token."""

from dataclasses import dataclass

import falcon.asgi

from garage_rbac.infrastructure.auth.keycloak_provider import KeycloakProvider


@dataclass
class RequestUser:
    """User from request context."""

    user_id: str
    email: str | None = None
    username: str | None = None


class AuthMiddleware:
    """Middleware that validates the bearer token and sets req.context.user.

    ``req.context.user`` is None for missing or invalid credentials; resources
    answer 401 in that case.
    """

    def __init__(self, keycloak_provider: KeycloakProvider | None = None) -> None:
        self._keycloak = keycloak_provider

    async def process_request(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        """Extract user from Authorization header."""
        req.context.user = None
        auth = req.get_header("Authorization")
        if not auth or not auth.startswith("Bearer ") or not self._keycloak:
            return
        user = self._keycloak.decode_token(auth[7:])
        if user:
            req.context.user = RequestUser(
                user_id=user.user_id,
                email=user.email,
                username=user.username,
            )
