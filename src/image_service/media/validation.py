"""Upload checks run before anything touches the slot store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from fastapi import UploadFile

from ..config import UploadLimits
from .media_errors import PayloadTooLargeError, UnsupportedMediaError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class UploadValidationResult:
    content_type: str
    size_bytes: int
    filename: str


@dataclass(slots=True)
class UploadValidator:
    """MIME allowlist plus a per-file byte cap measured by streaming."""

    limits: UploadLimits

    def check_content_type(self, upload: UploadFile) -> str:
        content_type = upload.content_type or ""
        if content_type not in self.limits.allowed_content_types:
            logger.warning(
                "media.upload.unsupported_media",
                extra={"content_type": content_type, "original_name": upload.filename},
            )
            raise UnsupportedMediaError(content_type)
        return content_type

    async def measure(self, upload: UploadFile) -> int:
        """Count bytes up to the cap; the upload is rewound either way."""
        limit = self.limits.max_file_size_bytes
        total = 0
        try:
            while True:
                chunk = await upload.read(self.limits.chunk_size_bytes)
                if not chunk:
                    break
                total += len(chunk)
                if total > limit:
                    logger.warning(
                        "media.upload.payload_too_large",
                        extra={"original_name": upload.filename, "size_bytes": total, "limit_bytes": limit},
                    )
                    raise PayloadTooLargeError(total)
        finally:
            await upload.seek(0)
        return total

    async def validate(self, upload: UploadFile) -> UploadValidationResult:
        content_type = self.check_content_type(upload)
        size = await self.measure(upload)
        return UploadValidationResult(
            content_type=content_type,
            size_bytes=size,
            filename=upload.filename or "upload",
        )

    async def validate_all(self, uploads: Sequence[UploadFile]) -> list[UploadValidationResult]:
        """Validate the whole batch before any file of it is stored."""
        results = [await self.validate(upload) for upload in uploads]
        logger.info(
            "media.upload.validated",
            extra={"files": len(results), "size_bytes": sum(item.size_bytes for item in results)},
        )
        return results
