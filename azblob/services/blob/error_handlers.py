"""
FastAPI Exception Handlers for blob provisioning

Maps provisioning exceptions to HTTP responses.

Author: azblob-plugin contributors
Date: 2026
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from azblob.core.logging_config import get_correlation_id, log_with_context

from .exceptions import (
    BackendFailure,
    MissingOrInvalidTtl,
    ProvisioningError,
    TransientBackendFailure,
    ValidationFailure,
)


logger = logging.getLogger(__name__)


# Exception to HTTP status code mapping; most specific classes first
EXCEPTION_STATUS_CODES = {
    MissingOrInvalidTtl: status.HTTP_400_BAD_REQUEST,
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
    TransientBackendFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    BackendFailure: status.HTTP_502_BAD_GATEWAY,
}


def get_status_code_for_exception(exc: Exception) -> int:
    """
    Get HTTP status code for exception type.

    Args:
        exc: Exception instance

    Returns:
        HTTP status code
    """
    exc_type = type(exc)
    if exc_type in EXCEPTION_STATUS_CODES:
        return EXCEPTION_STATUS_CODES[exc_type]

    for exception_type, status_code in EXCEPTION_STATUS_CODES.items():
        if isinstance(exc, exception_type):
            return status_code

    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def validation_failure_handler(request: Request, exc: ValidationFailure) -> Response:
    """
    Handle ValidationFailure exceptions.

    The body is the bare message (e.g. ``TTL is required.``) sent as plain text.
    """
    status_code = get_status_code_for_exception(exc)

    log_with_context(
        logger,
        logging.INFO,
        f"Rejected request: {exc.message}",
        error_code=exc.error_code,
        path=request.url.path,
        **exc.details,
    )

    return PlainTextResponse(exc.message, status_code=status_code)


async def backend_failure_handler(request: Request, exc: BackendFailure) -> Response:
    """Handle BackendFailure exceptions with a JSON error body."""
    status_code = get_status_code_for_exception(exc)

    log_with_context(
        logger,
        logging.ERROR,
        f"Storage backend failure: {exc.message}",
        error_code=exc.error_code,
        status_code=status_code,
        path=request.url.path,
    )

    content = exc.to_dict()
    if correlation_id := get_correlation_id():
        content["error"]["details"]["correlation_id"] = correlation_id

    return JSONResponse(status_code=status_code, content=content)


async def provisioning_error_handler(request: Request, exc: ProvisioningError) -> Response:
    """Handle any other ProvisioningError."""
    status_code = get_status_code_for_exception(exc)
    logger.error(f"Provisioning failed: {exc.message}")
    return JSONResponse(status_code=status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Register the provisioning exception handlers on an application."""
    app.add_exception_handler(ValidationFailure, validation_failure_handler)
    app.add_exception_handler(BackendFailure, backend_failure_handler)
    app.add_exception_handler(ProvisioningError, provisioning_error_handler)
