"""Common authentication dependencies for FastAPI routers."""

from __future__ import annotations

import structlog
from fastapi import Depends, Header, HTTPException, Request, status

from ..media.media_models import FailureReason
from .auth_service import AuthenticatedService, ServiceAuthClient, ServiceAuthError

logger = structlog.get_logger(__name__)


def get_service_auth(request: Request) -> ServiceAuthClient:
    try:
        return request.app.state.service_auth  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("ServiceAuthClient is not configured") from exc


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"status": "error", "failure_reason": FailureReason.UNAUTHORIZED.value},
    )


async def require_service(
    request: Request,
    api_key: str | None = Header(None, alias="X-API-Key"),
    service_name: str | None = Header(None, alias="X-Service-Name"),
    client: ServiceAuthClient = Depends(get_service_auth),
) -> AuthenticatedService:
    if not api_key or not service_name:
        logger.info(
            "auth.headers.missing",
            path=request.url.path,
            api_key="present" if api_key else "missing",
            service_name=service_name,
        )
        raise _unauthorized()
    try:
        service = await client.verify(api_key, service_name)
    except ServiceAuthError as exc:
        raise _unauthorized() from exc
    request.state.service = service
    return service


__all__ = ["get_service_auth", "require_service"]
