"""Entity slot upload, listing and deletion."""

from __future__ import annotations

import asyncio
import logging
import uuid
import weakref
from dataclasses import dataclass, field

from fastapi import UploadFile

from ..exceptions import RepositoryError
from ..repositories.media_record_repository import MediaRecordRepository
from .asset_cache import AssetCache, slot_cache_key
from .authorization import AuthorizationGuard
from .media_errors import InvalidUploadError
from .media_models import AssetDescriptor, StoredObject, utcnow
from .metadata_aggregate import MetadataAggregateStore
from .slot_naming import extension_of, is_safe_id, slot_name_for, slot_stem
from .slot_store import SlotStore
from .validation import UploadValidator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MediaService:
    """Coordinates the slot store, metadata aggregate and shadow cache.

    Every read-merge-write of an entity aggregate runs under that entity's
    lock, so concurrent uploads to one entity are serialized instead of
    overwriting each other's additions.
    """

    store: SlotStore
    aggregates: MetadataAggregateStore
    cache: AssetCache
    validator: UploadValidator
    guard: AuthorizationGuard
    records: MediaRecordRepository | None = None
    prune_metadata_on_delete: bool = False
    log: logging.Logger = field(default_factory=lambda: logger)
    # a lock lives only while a request holds or awaits it
    _entity_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary
    )

    def entity_lock(self, entity_id: str) -> asyncio.Lock:
        lock = self._entity_locks.get(entity_id)
        if lock is None:
            lock = asyncio.Lock()
            self._entity_locks[entity_id] = lock
        return lock

    async def upload(
        self,
        uploads: list[UploadFile] | None,
        *,
        entity_id: str | None,
        entity_type: str | None,
        company_id: str | None,
        start_position: int = 0,
    ) -> list[AssetDescriptor]:
        """Store ``uploads`` in consecutive slots starting at ``start_position``."""
        if not uploads:
            raise InvalidUploadError("No files uploaded")
        if not entity_id or not entity_type or not company_id:
            raise InvalidUploadError("entityId, entityType and companyId are required")
        _require_safe_id(entity_id, "entityId")
        _require_safe_id(company_id, "companyId")
        if start_position < 0:
            raise InvalidUploadError("position must be a non-negative integer")

        validated = await self.validator.validate_all(uploads)

        async with self.entity_lock(entity_id):
            descriptors: list[AssetDescriptor] = []
            for index, (upload, checked) in enumerate(zip(uploads, validated)):
                position = start_position + index
                stored_name = slot_name_for(entity_id, position, extension_of(upload.filename))
                size = await self.store.write_upload(stored_name, upload)
                self._drop_shadowed(entity_id, position, keep=stored_name)
                descriptor = AssetDescriptor(
                    id=str(uuid.uuid4()),
                    entity_id=entity_id,
                    entity_type=entity_type,
                    company_id=company_id,
                    stored_name=stored_name,
                    original_name=checked.filename,
                    mime_type=checked.content_type,
                    size_bytes=size,
                    position=position,
                    created_at=utcnow(),
                )
                self.cache.set(slot_cache_key(entity_id, position), descriptor)
                self._record(descriptor)
                descriptors.append(descriptor)

            self.aggregates.merge_and_write(entity_id, descriptors)

        self.log.info(
            "media.upload.stored",
            extra={
                "entity_id": entity_id,
                "company_id": company_id,
                "files": [item.stored_name for item in descriptors],
            },
        )
        return descriptors

    def list_entity(self, entity_id: str) -> list[AssetDescriptor]:
        """Return the entity aggregate sorted by position; never consults the cache."""
        _require_safe_id(entity_id, "entityId")
        return sorted(self.aggregates.read(entity_id), key=lambda item: item.position)

    def resolve_file(self, stored_name: str) -> StoredObject:
        return self.store.open_object(stored_name)

    async def delete(self, entity_id: str, position: int, company_id: str | None) -> list[str]:
        """Remove the slot's blob(s) and cache entry after the ownership check."""
        if not company_id:
            raise InvalidUploadError("Company ID is required")
        _require_safe_id(entity_id, "entityId")

        async with self.entity_lock(entity_id):
            self.guard.check(company_id, entity_id, position)
            removed = self.store.delete_stem(slot_stem(entity_id, position))
            self.cache.delete(slot_cache_key(entity_id, position))
            self._forget(entity_id, position)
            if self.prune_metadata_on_delete:
                self.aggregates.prune_and_write(entity_id, position)

        self.log.info(
            "media.delete.completed",
            extra={
                "entity_id": entity_id,
                "position": position,
                "company_id": company_id,
                "removed": removed,
                "aggregate_pruned": self.prune_metadata_on_delete,
            },
        )
        return removed

    def _drop_shadowed(self, entity_id: str, position: int, *, keep: str) -> None:
        """Remove a previous blob in the same slot stored under another extension."""
        for obj in self.store.list_stem(slot_stem(entity_id, position)):
            if obj.key != keep:
                self.store.delete_key(obj.key)

    def _record(self, descriptor: AssetDescriptor) -> None:
        if self.records is None:
            return
        try:
            self.records.create(descriptor)
        except RepositoryError as exc:
            self.log.warning(
                "media.records.write_failed",
                extra={"entity_id": descriptor.entity_id, "error": str(exc)},
            )

    def _forget(self, entity_id: str, position: int) -> None:
        if self.records is None:
            return
        try:
            self.records.remove_slot(entity_id, position)
        except RepositoryError as exc:
            self.log.warning(
                "media.records.delete_failed",
                extra={"entity_id": entity_id, "error": str(exc)},
            )


def _require_safe_id(value: str, field_name: str) -> None:
    if not is_safe_id(value):
        raise InvalidUploadError(
            f"{field_name} may only contain letters, digits, '_' and '-'"
        )
