# drive_service/errors.py
"""Error kinds raised by the storage engine and the request layer, plus the
FastAPI handlers that turn them into JSON responses."""
import logging
from http import HTTPStatus
from typing import Any, List, Optional

import pydantic
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class DriveError(Exception):
    """Base class for errors with a fixed HTTP status"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(DriveError):
    """Raised when a mutating operation targets a missing record"""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found with ID: {entity_id}")


class QuotaExceededError(DriveError):
    """Raised when an upload would push the user past their storage limit"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, storage_limit: int, storage_used: int, required_bytes: int):
        self.storage_limit = storage_limit
        self.storage_used = storage_used
        self.required_bytes = required_bytes
        super().__init__(
            f"Storage limit exceeded: need {required_bytes} bytes, "
            f"only {max(0, storage_limit - storage_used)} bytes available"
        )


class FileTooLargeError(DriveError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"File too large: {size} bytes exceeds the {limit} byte limit")


class MalformedContentError(DriveError):
    """Stored content is not a base64 data URL"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Invalid file content format"):
        super().__init__(message)


class InvalidMoveError(DriveError):
    status_code = status.HTTP_400_BAD_REQUEST


def error_body(status_code: int, message: str, errors: Optional[List[Any]] = None) -> dict:
    body = {
        "error": HTTPStatus(status_code).phrase,
        "message": message,
        "status": status_code,
    }
    if errors is not None:
        body["errors"] = errors
    return body


async def handle_drive_error(request: Request, exc: DriveError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
    )


async def handle_validation_errors(request: Request, exc: Exception) -> JSONResponse:
    """Schema rejections (request body, query or internal model) become a 400
    carrying the field-level error list."""
    errors = exc.errors() if isinstance(exc, (RequestValidationError, pydantic.ValidationError)) else []
    # ctx may hold the original exception object
    errors = jsonable_encoder(errors, custom_encoder={Exception: str})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(status.HTTP_400_BAD_REQUEST, "Validation error", errors),
    )


async def handle_broad_exceptions(request: Request, call_next):
    """Catch anything the route handlers did not turn into a response"""
    try:
        return await call_next(request)
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An unexpected error occurred",
            ),
        )
