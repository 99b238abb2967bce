"""Single-slot company logo replacement."""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
import weakref
from dataclasses import dataclass, field
from typing import Any

from fastapi import UploadFile

from .asset_cache import AssetCache, logo_cache_key
from .media_errors import InvalidUploadError, LogoNotFoundError
from .media_links import build_logo_url
from .media_models import LogoAsset, StoredObject, utcnow
from .slot_naming import (
    extension_of,
    is_safe_id,
    logo_metadata_name_for,
    logo_name_for,
    logo_stem,
)
from .slot_store import SlotStore
from .validation import UploadValidator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LogoSlotManager:
    """Keep at most one logo blob per company.

    A replacement stages the upload under a unique key, removes every blob in
    the company's logo slot, then moves the staged file into place. The whole
    sequence holds the company's lock. Readers still pick the most recently
    modified blob if duplicates are found (e.g. left by another process).
    """

    store: SlotStore
    cache: AssetCache
    validator: UploadValidator
    log: logging.Logger = field(default_factory=lambda: logger)
    _company_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary
    )

    def company_lock(self, company_id: str) -> asyncio.Lock:
        lock = self._company_locks.get(company_id)
        if lock is None:
            lock = asyncio.Lock()
            self._company_locks[company_id] = lock
        return lock

    async def replace(self, upload: UploadFile | None, company_id: str | None) -> LogoAsset:
        if upload is None:
            raise InvalidUploadError("No file uploaded")
        if not company_id:
            raise InvalidUploadError("Company ID is required")
        if not is_safe_id(company_id):
            raise InvalidUploadError("companyId may only contain letters, digits, '_' and '-'")

        checked = await self.validator.validate(upload)
        extension = extension_of(upload.filename)

        async with self.company_lock(company_id):
            staging_key = self.store.staging_key(extension)
            size = await self.store.write_upload(staging_key, upload)
            try:
                previous = [obj.key for obj in self.store.list_stem(logo_stem(company_id))]
                for key in previous:
                    self.store.delete_key(key)
                final_key = logo_name_for(company_id, extension)
                self.store.move(staging_key, final_key)
            except Exception:
                self.store.delete_key(staging_key)
                raise

            asset = LogoAsset(
                id=str(uuid.uuid4()),
                company_id=company_id,
                stored_name=final_key,
                original_name=checked.filename,
                mime_type=checked.content_type,
                size_bytes=size,
                created_at=utcnow(),
            )
            self.cache.set(logo_cache_key(company_id), asset)
            self.store.write_document(
                logo_metadata_name_for(company_id),
                json.dumps(asset.to_document(), indent=2),
            )

        self.log.info(
            "logo.replace.installed",
            extra={"company_id": company_id, "stored_name": final_key, "replaced": previous},
        )
        return asset

    def current_object(self, company_id: str) -> StoredObject:
        """Return the company's logo blob; the newest one wins when duplicated."""
        candidates = self.store.list_stem(logo_stem(company_id))
        if not candidates:
            raise LogoNotFoundError(company_id)
        if len(candidates) > 1:
            self.log.warning(
                "logo.duplicates.found",
                extra={"company_id": company_id, "keys": [obj.key for obj in candidates]},
            )
        return max(candidates, key=lambda obj: (obj.modified_at, obj.key))

    def current_asset(self, company_id: str) -> LogoAsset | None:
        """Return the stored logo descriptor, falling back to the warm cache."""
        raw = self.store.read_document(logo_metadata_name_for(company_id))
        if raw is not None:
            try:
                return LogoAsset.from_document(json.loads(raw))
            except (ValueError, TypeError, AttributeError) as exc:
                self.log.warning(
                    "logo.metadata.corrupted",
                    extra={"company_id": company_id, "error": str(exc)},
                )
        cached = self.cache.get(logo_cache_key(company_id))
        return cached if isinstance(cached, LogoAsset) else None

    def describe(self, company_id: str) -> dict[str, Any]:
        """Descriptor plus retrieval URL for the company's current logo."""
        obj = self.current_object(company_id)
        asset = self.current_asset(company_id)
        payload: dict[str, Any] = asset.to_document() if asset is not None else {}
        payload["storedName"] = obj.key
        payload["url"] = build_logo_url(company_id)
        return payload
