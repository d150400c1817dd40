"""Exception handlers turning every failure into the standard response envelope."""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.responses import send_error
from app.core.config import settings
from app.core.errors import SafariaError, StorageError, ValidationError

logger = logging.getLogger(__name__)


def _diagnostic(detail: str | None) -> str | None:
    # diagnostic detail never leaves the server in production
    if settings.is_production:
        return None
    return detail


async def safaria_error_handler(request: Request, exc: SafariaError):
    if isinstance(exc, StorageError):
        logger.error("%s %s -> %s: %s (%s)", request.method, request.url.path,
                     type(exc).__name__, exc.message, exc.detail)
    extra = {}
    if isinstance(exc, ValidationError):
        extra["errors"] = {"missingFields": exc.missing, "invalidFields": exc.invalid}
    return send_error(exc.message, exc.status_code, _diagnostic(exc.detail), **extra)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return send_error(str(exc.detail), exc.status_code)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]) for err in exc.errors()]
    return send_error("Invalid fields: " + ", ".join(fields), 400, _diagnostic(str(exc.errors())),
                      errors={"missingFields": [], "invalidFields": fields})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return send_error("Internal server error", 500, _diagnostic(repr(exc)))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SafariaError, safaria_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
