"""Error taxonomy shared by every route.

Handlers raise the classes below; ``register_exception_handlers`` turns them
into JSON responses so nothing leaves the API unformatted.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("gumboard.errors")


class GumboardError(Exception):
    status_code = 500
    code = "INTERNAL"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict:
        return {"error": self.message, "code": self.code}


class Unauthenticated(GumboardError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Unauthorized"


class NoOrganization(GumboardError):
    status_code = 403
    code = "NO_ORGANIZATION"
    default_message = "No organization found"


class AccessDenied(GumboardError):
    status_code = 403
    code = "ACCESS_DENIED"
    default_message = "Access denied"


class NotFound(GumboardError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class SomeNotFound(NotFound):
    code = "SOME_NOT_FOUND"
    default_message = "Some notes not found"


class ValidationFailed(GumboardError):
    status_code = 400
    code = "VALIDATION_FAILED"
    default_message = "Validation failed"

    def __init__(self, message: str | None = None, details: list | None = None):
        super().__init__(message)
        self.details = details or []

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["details"] = self.details
        return payload


class CountMismatch(GumboardError):
    status_code = 400
    code = "COUNT_MISMATCH"
    default_message = "Item count does not match the checklist"


class VersionConflict(GumboardError):
    status_code = 409
    code = "VERSION_CONFLICT"
    default_message = "Version conflict"


class Internal(GumboardError):
    pass


def _validation_details(exc: RequestValidationError) -> list[dict]:
    details = []
    for err in exc.errors():
        details.append({
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        })
    return details


async def _handle_gumboard_error(request: Request, exc: GumboardError):
    if exc.status_code >= 500:
        logger.error("API_ERROR method=%s path=%s code=%s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _handle_request_validation(request: Request, exc: RequestValidationError):
    error = ValidationFailed(details=_validation_details(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


async def _handle_unexpected(request: Request, exc: Exception):
    logger.exception("UNHANDLED method=%s path=%s", request.method, request.url.path)
    error = Internal()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GumboardError, _handle_gumboard_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)
