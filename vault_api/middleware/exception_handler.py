"""Exception handlers for structured error responses."""

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..exceptions import ErrorCode, VaultException

logger = logging.getLogger(__name__)


async def vault_exception_handler(request: Request, exc: VaultException) -> JSONResponse:
    """
    Handle vault exceptions and return structured JSON responses.

    Client errors are logged at WARNING, storage failures at ERROR.

    Args:
        request: FastAPI request object
        exc: VaultException instance

    Returns:
        JSONResponse with error details
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"VaultException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as VALIDATION_ERROR (400) like service-level checks."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ())[1:]) or None
    message = first.get("msg", "Invalid request")

    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "field": field},
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": ErrorCode.VALIDATION_ERROR.value,
            "message": message,
            "details": {"field": field} if field else {},
        },
    )
