"""Error Handlers: global exception handlers for the Books API.

Invariants:
    - BooksApiError → its own status with {success: false, error, details?, timestamp}
    - RequestValidationError (malformed or non-object JSON body) → 400, same envelope
    - Unmatched route or method → 404 {success: false, error: "Route not found", path, method, timestamp}
    - Exception (catch-all) → 500; message only outside production, never a stack trace

Design Decisions:
    - Four-layer handler: domain, request parsing, routing, catch-all
    - Extracted from main.py to keep the entry point small
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import get_settings
from app.core.book_validation import VALIDATION_FAILED, collect_field_errors
from app.core.errors import BooksApiError, InternalError, utc_timestamp

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = "Route not found"


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(BooksApiError)
    async def books_api_error_handler(request: Request, exc: BooksApiError):
        """Handle all Books API domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"BooksApiError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "method": request.method,
                "book_id": exc.context.book_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status,
            content=jsonable_encoder(exc.to_response()),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Body could not be parsed into a JSON object."""
        logger.warning(f"Malformed request on {request.url.path}: {exc.errors()}")
        # json_invalid carries ("body", <char offset>); report it against the body
        errors = [
            {
                **e,
                "loc": () if e.get("type") == "json_invalid"
                else tuple(part for part in e["loc"] if part != "body"),
            }
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder({
                "success": False,
                "error": VALIDATION_FAILED,
                "details": collect_field_errors(errors),
                "timestamp": utc_timestamp(),
            }),
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (
            status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED,
        ):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={
                    "success": False,
                    "error": ROUTE_NOT_FOUND,
                    "path": request.url.path,
                    "method": request.method,
                    "timestamp": utc_timestamp(),
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "success": False,
                "error": str(exc.detail),
                "timestamp": utc_timestamp(),
            },
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all: never leaks stack traces."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"path": request.url.path, "method": request.method},
        )
        if get_settings().is_production or not str(exc):
            error = InternalError()
        else:
            error = InternalError(str(exc))
        return JSONResponse(
            status_code=error.http_status, content=error.to_response(),
        )
