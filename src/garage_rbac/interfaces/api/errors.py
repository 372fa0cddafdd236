"""Falcon error handlers - map domain exceptions to HTTP responses."""

import logging

import falcon
import falcon.asgi

from garage_rbac.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    GarageRBACError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


async def handle_domain_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: GarageRBACError, params
) -> None:
    """Domain error -> 400/403/404/409. 403 bodies never name the permission."""
    if isinstance(ex, ForbiddenError):
        logger.info(
            "Forbidden %s %s for %s: missing %s",
            req.method,
            req.path,
            getattr(getattr(req.context, "user", None), "user_id", None),
            ex.permission_key,
        )
        resp.status = falcon.HTTP_403
        resp.media = {"error": "Not authorized"}
    elif isinstance(ex, NotFoundError):
        resp.status = falcon.HTTP_404
        resp.media = {"error": str(ex)}
    elif isinstance(ex, ConflictError):
        resp.status = falcon.HTTP_409
        resp.media = {"error": str(ex)}
    elif isinstance(ex, ValidationError):
        resp.status = falcon.HTTP_400
        resp.media = {"error": str(ex)}
    else:
        logger.error("Unmapped domain error on %s %s: %r", req.method, req.path, ex)
        resp.status = falcon.HTTP_500
        resp.media = {"error": "Internal Server Error"}


async def handle_unexpected_error(
    req: falcon.asgi.Request, resp: falcon.asgi.Response, ex: Exception, params
) -> None:
    logger.exception("Unhandled error on %s %s", req.method, req.path, exc_info=ex)
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal Server Error"}


def register_error_handlers(app: falcon.asgi.App) -> None:
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(GarageRBACError, handle_domain_error)
