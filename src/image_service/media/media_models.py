"""Media data models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import StrEnum
from pathlib import Path
from typing import Any

LOGO_ENTITY_TYPE = "company-logo"


class FailureReason(StrEnum):
    """Failure reasons returned in error payloads."""

    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    INTERNAL_ERROR = "internal_error"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not value:
        return utcnow()
    # JavaScript ISO strings end with "Z"
    text = str(value).replace("Z", "+00:00")
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True, slots=True)
class AssetDescriptor:
    """One stored binary in an entity slot and its provenance."""

    id: str
    entity_id: str
    entity_type: str
    company_id: str
    stored_name: str
    original_name: str
    mime_type: str
    size_bytes: int
    position: int
    created_at: datetime

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "entityId": self.entity_id,
            "entityType": self.entity_type,
            "companyId": self.company_id,
            "storedName": self.stored_name,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
            "position": self.position,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "AssetDescriptor":
        """Build a descriptor from an aggregate entry.

        Accepts the legacy ``filename``/``size`` keys written by earlier
        releases of the service.
        """
        stored_name = data.get("storedName") or data.get("filename")
        if not stored_name or "entityId" not in data or "position" not in data:
            raise ValueError("aggregate entry is missing entityId, position or storedName")
        return cls(
            id=str(data.get("id") or ""),
            entity_id=str(data["entityId"]),
            entity_type=str(data.get("entityType") or ""),
            company_id=str(data.get("companyId") or ""),
            stored_name=str(stored_name),
            original_name=str(data.get("originalName") or stored_name),
            mime_type=str(data.get("mimeType") or "application/octet-stream"),
            size_bytes=int(data.get("sizeBytes", data.get("size", 0)) or 0),
            position=int(data["position"]),
            created_at=_parse_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True, slots=True)
class LogoAsset:
    """The single logo occupying a company's logo slot."""

    id: str
    company_id: str
    stored_name: str
    original_name: str
    mime_type: str
    size_bytes: int
    created_at: datetime

    @property
    def entity_id(self) -> str:
        return self.company_id

    @property
    def entity_type(self) -> str:
        return LOGO_ENTITY_TYPE

    def to_document(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "entityId": self.entity_id,
            "entityType": self.entity_type,
            "companyId": self.company_id,
            "storedName": self.stored_name,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "sizeBytes": self.size_bytes,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "LogoAsset":
        stored_name = data.get("storedName") or data.get("filename")
        company_id = data.get("companyId")
        if not stored_name or not company_id:
            raise ValueError("logo document is missing companyId or storedName")
        return cls(
            id=str(data.get("id") or ""),
            company_id=str(company_id),
            stored_name=str(stored_name),
            original_name=str(data.get("originalName") or stored_name),
            mime_type=str(data.get("mimeType") or "application/octet-stream"),
            size_bytes=int(data.get("sizeBytes", data.get("size", 0)) or 0),
            created_at=_parse_timestamp(data.get("createdAt")),
        )


@dataclass(frozen=True, slots=True)
class StoredObject:
    """A blob found in a storage namespace."""

    key: str
    path: Path
    size_bytes: int
    modified_at: float
