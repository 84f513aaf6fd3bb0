"""Global exception handlers that map domain exceptions to HTTP responses."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from funeral_core.errors import (
    CONFLICT,
    DUPLICATE_RESOURCE,
    NOT_FOUND,
    PERSISTENCE_ERROR,
    RECORD_DELETED,
    VALIDATION_ERROR,
    ConflictError,
    DomainValidationError,
    DuplicateResourceError,
    NotFoundError,
    PersistenceError,
    RecordDeletedError,
)
from funeral_core.schemas.error import ConflictResponse, ErrorResponse


def _error_response(status_code: int, detail: str, code: str) -> JSONResponse:
    """Return a standardized error response with detail and machine-readable code."""
    body = ErrorResponse(detail=detail, code=code)
    return JSONResponse(status_code=status_code, content=body.model_dump())


def domain_validation_error_handler(
    _request: Request, exc: DomainValidationError
) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        str(exc),
        VALIDATION_ERROR,
    )


def duplicate_resource_error_handler(
    _request: Request, exc: DuplicateResourceError
) -> JSONResponse:
    return _error_response(
        status.HTTP_409_CONFLICT,
        str(exc),
        DUPLICATE_RESOURCE,
    )


def record_deleted_error_handler(_request: Request, exc: RecordDeletedError) -> JSONResponse:
    return _error_response(
        status.HTTP_409_CONFLICT,
        str(exc),
        RECORD_DELETED,
    )


def conflict_error_handler(_request: Request, exc: ConflictError) -> JSONResponse:
    body = ConflictResponse(
        detail=str(exc),
        code=CONFLICT,
        business_key=exc.business_key,
        expected_version=exc.expected_version,
    )
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump())


def not_found_error_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(
        status.HTTP_404_NOT_FOUND,
        str(exc),
        NOT_FOUND,
    )


def persistence_error_handler(_request: Request, exc: PersistenceError) -> JSONResponse:
    return _error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        str(exc),
        PERSISTENCE_ERROR,
    )


def register_exception_handlers(app):
    """Register domain exception handlers on the FastAPI app."""
    app.add_exception_handler(DomainValidationError, domain_validation_error_handler)
    app.add_exception_handler(DuplicateResourceError, duplicate_resource_error_handler)
    app.add_exception_handler(RecordDeletedError, record_deleted_error_handler)
    app.add_exception_handler(ConflictError, conflict_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)
