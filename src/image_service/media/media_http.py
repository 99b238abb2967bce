"""Translation of media domain errors to HTTP responses."""

from __future__ import annotations

import mimetypes

from fastapi import HTTPException, status
from fastapi.responses import FileResponse

from .media_errors import (
    AssetNotFoundError,
    InvalidUploadError,
    MediaError,
    OwnershipMismatchError,
    PayloadTooLargeError,
    UnsupportedMediaError,
)
from .media_models import FailureReason, StoredObject

# one year, matching the immutable slot-key contract of file URLs
FILE_CACHE_HEADERS = {
    "Cache-Control": "public, max-age=31536000",
    "Access-Control-Allow-Origin": "*",
}

_STATUS_BY_ERROR: list[tuple[type[MediaError], int, FailureReason]] = [
    (InvalidUploadError, status.HTTP_400_BAD_REQUEST, FailureReason.INVALID_REQUEST),
    (UnsupportedMediaError, status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, FailureReason.UNSUPPORTED_MEDIA_TYPE),
    (PayloadTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, FailureReason.PAYLOAD_TOO_LARGE),
    (OwnershipMismatchError, status.HTTP_403_FORBIDDEN, FailureReason.FORBIDDEN),
    (AssetNotFoundError, status.HTTP_404_NOT_FOUND, FailureReason.NOT_FOUND),
]


def error(status_code: int, reason: FailureReason, details: str | None = None) -> HTTPException:
    detail: dict[str, str] = {"status": "error", "failure_reason": reason.value}
    if details:
        detail["details"] = details
    return HTTPException(status_code=status_code, detail=detail)


def internal_error() -> HTTPException:
    return error(status.HTTP_500_INTERNAL_SERVER_ERROR, FailureReason.INTERNAL_ERROR)


def translate(exc: MediaError) -> HTTPException:
    """Map a domain error to its HTTP status; unknown kinds become 500."""
    for error_type, status_code, reason in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            details = str(exc) if isinstance(exc, InvalidUploadError) else None
            return error(status_code, reason, details)
    return internal_error()


def file_response(obj: StoredObject) -> FileResponse:
    media_type = mimetypes.guess_type(obj.key)[0] or "application/octet-stream"
    return FileResponse(
        path=obj.path,
        media_type=media_type,
        headers=dict(FILE_CACHE_HEADERS),
    )
