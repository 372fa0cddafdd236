"""Domain exceptions."""


class GarageRBACError(Exception):
    """Base exception for garage-rbac."""

    pass


class ValidationError(GarageRBACError):
    """Validation failed for input data."""

    pass


class ForbiddenError(GarageRBACError):
    """Caller lacks a required permission.

    The message is always the generic "Not authorized". The missing key is
    kept on ``permission_key`` for server-side logs and audit only.
    """

    def __init__(self, permission_key: str | None = None) -> None:
        super().__init__("Not authorized")
        self.permission_key = permission_key


class NotFoundError(GarageRBACError):
    """Requested entity was not found."""

    def __init__(self, entity: str, identifier: object) -> None:
        super().__init__(entity, str(identifier))
        self.entity = entity
        self.identifier = str(identifier)

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.identifier}"


class ConflictError(GarageRBACError):
    """Operation conflicts with current state (system role, duplicate key)."""

    pass
