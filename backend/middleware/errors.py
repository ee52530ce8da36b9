"""Error types and exception handlers.

Every error leaving the API has the body {"error": ..., "message": ...};
validation errors add a "details" list.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Postgres SQLSTATE -> (status, message)
INTEGRITY_ERRORS = {
    "23505": (status.HTTP_409_CONFLICT, "Resource already exists"),
    "23503": (status.HTTP_400_BAD_REQUEST, "Invalid reference to related resource"),
    "23502": (status.HTTP_400_BAD_REQUEST, "Required field is missing"),
}


class ApiError(Exception):
    """Terminal API failure with a stable error code and a human-readable message."""

    def __init__(self, status_code: int, error: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.error = error
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


def not_found(what: str) -> ApiError:
    """404 for a missing resource, e.g. not_found("Client")."""
    return ApiError(
        status.HTTP_404_NOT_FOUND,
        f"{what} not found",
        f"The requested {what.lower()} does not exist",
    )


def access_denied(message: str) -> ApiError:
    return ApiError(status.HTTP_403_FORBIDDEN, "Access denied", message)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors (unknown route, bad method) in the API shape."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        body = {
            "error": "Route not found",
            "message": f"The requested endpoint {request.url.path} does not exist.",
        }
    else:
        body = {"error": str(exc.detail), "message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        details.append({
            "field": ".".join(loc),
            "message": err.get("msg", "Invalid value"),
        })
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation failed",
            "message": "; ".join(f"{d['field']}: {d['message']}" for d in details) or "Invalid request",
            "details": details,
        },
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    status_code, message = INTEGRITY_ERRORS.get(
        code, (status.HTTP_409_CONFLICT, "Request conflicts with existing data")
    )
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {code}")
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "message": message},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=exc,
    )
    body = {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "path": request.url.path,
    }
    if settings.debug:
        body["message"] = str(exc)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the API's exception handlers on an application."""
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
