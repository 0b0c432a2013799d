"""Global exception handlers mapping ledger errors to ErrorResponse bodies."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..services.errors import (
    InvalidSlackHandle,
    LedgerError,
    OperationValidationError,
    TransactionFailedError,
    UserDeleted,
    WagerNotFound,
    WagerParameterPolicyViolation,
)
from ..schemas import ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


def status_for(exc: LedgerError) -> int:
    if isinstance(exc, OperationValidationError):
        return 422  # Starlette deprecated the HTTP_422_UNPROCESSABLE_ENTITY name
    if isinstance(exc, WagerNotFound):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, UserDeleted):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, TransactionFailedError):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


def build_error_response(exc: LedgerError) -> ErrorResponse:
    details = []
    if isinstance(exc, (WagerParameterPolicyViolation, InvalidSlackHandle)):
        details.append(ErrorDetail(field=exc.field, message=str(exc), code=exc.code))
    return ErrorResponse(error=exc.code, message=str(exc), details=details)


def register_error_handlers(app: FastAPI) -> None:
    """Register the ledger error handler on the FastAPI app."""

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{exc.code} on {request.url.path}: {exc} (cause: {exc.__cause__!r})")
        else:
            logger.info(f"{exc.code} on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status_code,
            content=build_error_response(exc).model_dump(by_alias=True),
        )
