# src/app/exceptions.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import logging

from src.core.exceptions import (
    DecodeError,
    ForbiddenError,
    LimitExceededError,
    NotFoundError,
    PersistenceError,
    PhotoServiceError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (LimitExceededError, 400),
    (DecodeError, 400),
    (NotFoundError, 404),
    (ForbiddenError, 403),
    (StorageError, 500),
    (PersistenceError, 500),
)


def status_for(exc: PhotoServiceError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(PhotoServiceError)
    async def photo_service_exception_handler(request: Request, exc: PhotoServiceError):
        status_code = status_for(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error_code} {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code} {exc.message}")
        return JSONResponse(
            status_code=status_code,
            content={
                "error_code": exc.error_code,
                "message": exc.message,
                "details": exc.details,
            },
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app
