"""Error Handlers — global exception handlers for the SwapBridge API.

Invariants:
    - BridgeError → {status, success: false, result: {code, message, ...}}
    - RequestValidationError → 400 envelope with field-level details
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Three-layer handler: domain (BridgeError), validation (Pydantic), catch-all (Exception)
    - Informational outcomes (no deposit yet) logged at INFO, not ERROR
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from swapbridge.core.errors import BridgeError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_bridge_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_bridge_error_handler(app: FastAPI) -> None:

    @app.exception_handler(BridgeError)
    async def bridge_error_handler(request: Request, exc: BridgeError):
        """Handle all SwapBridge domain/infrastructure errors."""
        level = (
            logging.INFO if exc.severity == ErrorSeverity.INFO else logging.ERROR
        )
        logger.log(
            level,
            f"BridgeError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": status.HTTP_500_INTERNAL_SERVER_ERROR,
                "success": False,
                "result": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "status": status.HTTP_400_BAD_REQUEST,
        "success": False,
        "result": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
