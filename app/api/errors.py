# app/api/errors.py

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import (
    AuthFailure,
    ClaimSystemError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    StaleVersionError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ConflictError: status.HTTP_409_CONFLICT,
    AuthFailure: status.HTTP_401_UNAUTHORIZED,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    StaleVersionError: status.HTTP_409_CONFLICT,
    StorageError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: ClaimSystemError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def claim_system_error_handler(request: Request, exc: ClaimSystemError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)

    return JSONResponse(
        status_code=code,
        content={
            "code": exc.code,
            "detail": exc.message,
            "errors": getattr(exc, "errors", [exc.message]),
        },
    )


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        errors.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid request"))

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "code": ValidationError.code,
            "detail": "; ".join(errors),
            "errors": errors,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClaimSystemError, claim_system_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
