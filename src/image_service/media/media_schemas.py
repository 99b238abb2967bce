"""Pydantic schemas for the media API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .media_links import build_file_url
from .media_models import AssetDescriptor, LogoAsset


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AssetResponse(_CamelModel):
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

    @classmethod
    def from_descriptor(cls, descriptor: AssetDescriptor) -> "AssetResponse":
        return cls(
            id=descriptor.id,
            entity_id=descriptor.entity_id,
            entity_type=descriptor.entity_type,
            company_id=descriptor.company_id,
            stored_name=descriptor.stored_name,
            original_name=descriptor.original_name,
            mime_type=descriptor.mime_type,
            size_bytes=descriptor.size_bytes,
            position=descriptor.position,
            created_at=descriptor.created_at,
        )


class AssetListItem(_CamelModel):
    id: str
    stored_name: str
    original_name: str
    mime_type: str
    url: str
    position: int

    @classmethod
    def from_descriptor(cls, descriptor: AssetDescriptor) -> "AssetListItem":
        return cls(
            id=descriptor.id,
            stored_name=descriptor.stored_name,
            original_name=descriptor.original_name,
            mime_type=descriptor.mime_type,
            url=build_file_url(descriptor.stored_name),
            position=descriptor.position,
        )


class LogoResponse(_CamelModel):
    id: str
    entity_id: str
    entity_type: str
    company_id: str
    stored_name: str
    original_name: str
    mime_type: str
    size_bytes: int
    created_at: datetime

    @classmethod
    def from_asset(cls, asset: LogoAsset) -> "LogoResponse":
        return cls(
            id=asset.id,
            entity_id=asset.entity_id,
            entity_type=asset.entity_type,
            company_id=asset.company_id,
            stored_name=asset.stored_name,
            original_name=asset.original_name,
            mime_type=asset.mime_type,
            size_bytes=asset.size_bytes,
            created_at=asset.created_at,
        )


class LogoMetadataResponse(_CamelModel):
    """Logo descriptor fields are absent when no metadata document exists."""

    stored_name: str
    url: str
    id: str | None = None
    entity_id: str | None = None
    entity_type: str | None = None
    company_id: str | None = None
    original_name: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = None
    created_at: datetime | None = None


class DeleteResponse(BaseModel):
    message: str
    removed: list[str]
