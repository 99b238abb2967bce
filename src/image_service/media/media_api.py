"""HTTP routes for entity slot media."""

from __future__ import annotations

import logging

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Query,
    Request,
    UploadFile,
    status,
)
from fastapi.responses import FileResponse

from ..auth.auth_dependencies import require_service
from .media_errors import MediaError
from .media_http import error, file_response, internal_error, translate
from .media_models import FailureReason
from .media_schemas import AssetListItem, AssetResponse, DeleteResponse
from .media_service import MediaService

router = APIRouter(prefix="/media", tags=["media"])
logger = logging.getLogger(__name__)


def get_media_service(request: Request) -> MediaService:
    """Fetch media service from application state."""
    try:
        return request.app.state.media_service  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("MediaService is not configured") from exc


def _parse_position(raw: str | None) -> int:
    if raw is None or raw.strip() == "":
        return 0
    try:
        value = int(raw)
    except ValueError:
        raise error(
            status.HTTP_400_BAD_REQUEST,
            FailureReason.INVALID_REQUEST,
            "position must be a non-negative integer",
        ) from None
    if value < 0:
        raise error(
            status.HTTP_400_BAD_REQUEST,
            FailureReason.INVALID_REQUEST,
            "position must be a non-negative integer",
        )
    return value


@router.post("/upload", dependencies=[Depends(require_service)])
async def upload_media(
    files: list[UploadFile] | None = File(None),
    entity_id: str | None = Form(None, alias="entityId"),
    entity_type: str | None = Form(None, alias="entityType"),
    company_id: str | None = Form(None, alias="companyId"),
    position: str | None = Form(None),
    service: MediaService = Depends(get_media_service),
) -> list[AssetResponse]:
    """Store uploaded files in consecutive slots of ``entityId``."""
    logger.info(
        "media.upload.request",
        extra={
            "entity_id": entity_id,
            "company_id": company_id,
            "files": [
                {"filename": item.filename, "content_type": item.content_type}
                for item in files or []
            ],
        },
    )
    start_position = _parse_position(position)
    try:
        descriptors = await service.upload(
            files,
            entity_id=entity_id,
            entity_type=entity_type,
            company_id=company_id,
            start_position=start_position,
        )
    except MediaError as exc:
        raise translate(exc) from exc
    except Exception as exc:
        logger.exception("media.upload.unexpected_error", extra={"entity_id": entity_id})
        raise internal_error() from exc
    return [AssetResponse.from_descriptor(item) for item in descriptors]


@router.get("/entity/{entity_id}", dependencies=[Depends(require_service)])
def list_entity_media(
    entity_id: str,
    service: MediaService = Depends(get_media_service),
) -> list[AssetListItem]:
    """List the entity aggregate; an entity without one yields ``[]``."""
    try:
        descriptors = service.list_entity(entity_id)
    except MediaError as exc:
        raise translate(exc) from exc
    except Exception as exc:
        logger.exception("media.list.unexpected_error", extra={"entity_id": entity_id})
        raise internal_error() from exc
    return [AssetListItem.from_descriptor(item) for item in descriptors]


@router.get("/file/{stored_name}")
def serve_media_file(
    stored_name: str,
    service: MediaService = Depends(get_media_service),
) -> FileResponse:
    try:
        obj = service.resolve_file(stored_name)
    except MediaError as exc:
        raise translate(exc) from exc
    return file_response(obj)


@router.delete("/{entity_id}/{position}", dependencies=[Depends(require_service)])
async def delete_media(
    entity_id: str,
    position: int,
    company_id: str | None = Query(None, alias="companyId"),
    service: MediaService = Depends(get_media_service),
) -> DeleteResponse:
    try:
        removed = await service.delete(entity_id, position, company_id)
    except MediaError as exc:
        raise translate(exc) from exc
    except Exception as exc:
        logger.exception(
            "media.delete.unexpected_error",
            extra={"entity_id": entity_id, "position": position},
        )
        raise internal_error() from exc
    return DeleteResponse(message="Media deleted successfully", removed=removed)
