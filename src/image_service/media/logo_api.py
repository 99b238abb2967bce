"""HTTP routes for company logos."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from ..auth.auth_dependencies import require_service
from .logo_service import LogoSlotManager
from .media_errors import MediaError
from .media_http import FILE_CACHE_HEADERS, file_response, internal_error, translate
from .media_schemas import LogoMetadataResponse, LogoResponse

router = APIRouter(prefix="/media/company-logo", tags=["logos"])
logger = logging.getLogger(__name__)


def get_logo_manager(request: Request) -> LogoSlotManager:
    try:
        return request.app.state.logo_manager  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("LogoSlotManager is not configured") from exc


@router.post("", dependencies=[Depends(require_service)])
async def upload_company_logo(
    file: UploadFile | None = File(None),
    company_id: str | None = Form(None, alias="companyId"),
    manager: LogoSlotManager = Depends(get_logo_manager),
) -> LogoResponse:
    """Replace the company's logo slot with the uploaded file."""
    logger.info(
        "logo.upload.request",
        extra={
            "company_id": company_id,
            "original_name": file.filename if file else None,
            "content_type": file.content_type if file else None,
        },
    )
    try:
        asset = await manager.replace(file, company_id)
    except MediaError as exc:
        raise translate(exc) from exc
    except Exception as exc:
        logger.exception("logo.upload.unexpected_error", extra={"company_id": company_id})
        raise internal_error() from exc
    return LogoResponse.from_asset(asset)


@router.get("/file/{company_id}")
def serve_company_logo_file(
    company_id: str,
    manager: LogoSlotManager = Depends(get_logo_manager),
) -> FileResponse:
    # "C1.png" and "C1" address the same logo
    base_id = company_id.split(".", 1)[0]
    try:
        obj = manager.current_object(base_id)
    except MediaError as exc:
        raise translate(exc) from exc
    return file_response(obj)


@router.get(
    "/{company_id}",
    dependencies=[Depends(require_service)],
    response_model=None,
)
def fetch_company_logo(
    company_id: str,
    metadata: bool = Query(False),
    manager: LogoSlotManager = Depends(get_logo_manager),
) -> FileResponse | JSONResponse:
    """Serve the logo bytes, or its descriptor and URL when ``metadata=true``."""
    try:
        if metadata:
            return _metadata_response(manager, company_id)
        obj = manager.current_object(company_id)
    except MediaError as exc:
        raise translate(exc) from exc
    return file_response(obj)


def _metadata_response(manager: LogoSlotManager, company_id: str) -> JSONResponse:
    payload = LogoMetadataResponse.model_validate(manager.describe(company_id))
    return JSONResponse(
        content=payload.model_dump(mode="json", by_alias=True, exclude_none=True),
        headers=dict(FILE_CACHE_HEADERS),
    )
