"""Service-to-service authentication against the external auth service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog


logger = structlog.get_logger(__name__)


class AuthError(Exception):
    """Base class for auth failures."""


class ServiceAuthError(AuthError):
    """Raised when the caller's service credentials are rejected or unverifiable."""


@dataclass(slots=True)
class AuthenticatedService:
    """Caller identity returned by the auth service."""

    id: str
    name: str
    allowed_services: list[str] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AuthenticatedService":
        allowed = payload.get("allowedServices") or []
        return cls(
            id=str(payload.get("id") or ""),
            name=str(payload.get("name") or ""),
            allowed_services=[str(item) for item in allowed],
        )


@dataclass(slots=True)
class ServiceAuthClient:
    """Verify ``X-API-Key``/``X-Service-Name`` pairs with a remote call."""

    base_url: str
    target_service: str = "image-service"
    timeout_seconds: float = 5.0
    transport: httpx.AsyncBaseTransport | None = None

    @property
    def verify_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/api/auth/verify"

    async def verify(self, api_key: str, service_name: str) -> AuthenticatedService:
        headers = {
            "X-API-Key": api_key,
            "X-Service-Name": service_name,
            "X-Target-Service": self.target_service,
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds, transport=self.transport
            ) as client:
                response = await client.post(self.verify_url, json={}, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning(
                "auth.verify.failure",
                service_name=service_name,
                reason="transport_error",
                error=str(exc),
            )
            raise ServiceAuthError("Auth service unreachable") from exc

        if response.status_code != 200:
            logger.warning(
                "auth.verify.failure",
                service_name=service_name,
                reason="rejected",
                status_code=response.status_code,
            )
            raise ServiceAuthError(f"Auth service rejected caller ({response.status_code})")

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        service = AuthenticatedService.from_payload(payload if isinstance(payload, dict) else {})
        logger.info("auth.verify.success", service_name=service_name, service_id=service.id)
        return service


__all__ = [
    "AuthError",
    "AuthenticatedService",
    "ServiceAuthClient",
    "ServiceAuthError",
]
