"""Domain errors and the handlers that render them as JSON responses.

Every error leaves the service as ``{"message": ...}`` with the status code
carried by the exception class. Handlers are attached to an app with
:func:`register_exception_handlers`.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

log = structlog.get_logger(__name__)


class PizzaError(Exception):
    """Base error with an HTTP status and a human-readable message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None, **extra: Any) -> None:
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message}
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body


class ValidationError(PizzaError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "invalid request"


class Unauthenticated(PizzaError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "unauthorized"


class InvalidToken(Unauthenticated):
    """Token is malformed, badly signed or was never issued by us."""


class TokenRevoked(Unauthenticated):
    """Token was logged out or belongs to a deleted user."""


class Forbidden(PizzaError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "unauthorized"


class NotFound(PizzaError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "not found"


class Conflict(PizzaError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "conflict"


class FactoryFulfillmentFailed(PizzaError):
    default_message = "Failed to fulfill order at factory"

    def __init__(self, report_url: str | None = None, reason: str | None = None) -> None:
        super().__init__(reportUrl=report_url)
        self.report_url = report_url
        self.reason = reason


async def handle_pizza_error(request: Request, exc: PizzaError) -> JSONResponse:
    if exc.status_code >= 500:
        log.warning(
            "request_failed",
            path=request.url.path,
            status=exc.status_code,
            error=exc.message,
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as 400 instead of FastAPI's 422."""
    problems = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "; ".join(problems) or "invalid request"},
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unmatched paths and unmatched methods both count as unknown endpoints.
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": "unknown endpoint"},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception(
        "unhandled_error", path=request.url.path, method=request.method, error=str(exc)
    )
    # The exception text may carry SQL or driver detail; it stays in the log.
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": PizzaError.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PizzaError, handle_pizza_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, handle_validation_error)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, handle_http_error)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, handle_unexpected_error)
