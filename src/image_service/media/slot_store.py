"""Filesystem blob storage addressed by slot keys."""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass, field
from pathlib import Path

from fastapi import UploadFile

from .media_errors import AssetNotFoundError, InvalidStorageKeyError
from .media_models import StoredObject
from .slot_naming import is_metadata_key, matches_stem

CHUNK_SIZE = 1 * 1024 * 1024  # 1 MiB


@dataclass(slots=True)
class SlotStore:
    """One flat storage namespace: blobs plus their JSON metadata documents."""

    root: Path
    chunk_size: int = CHUNK_SIZE
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def ensure_structure(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def path_for(self, key: str) -> Path:
        """Resolve ``key`` inside the namespace, rejecting traversal."""
        if (
            not key
            or key.startswith(".")
            or "/" in key
            or "\\" in key
            or "\x00" in key
        ):
            raise InvalidStorageKeyError(key)
        return self.root / key

    async def write_upload(self, key: str, upload: UploadFile) -> int:
        """Stream upload contents to ``key`` and return the byte count."""
        target = self.path_for(key)
        self.ensure_structure()
        size = 0
        with target.open("wb") as sink:
            while True:
                chunk = await upload.read(self.chunk_size)
                if not chunk:
                    break
                sink.write(chunk)
                size += len(chunk)
        await upload.seek(0)
        return size

    def write_bytes(self, key: str, data: bytes) -> int:
        target = self.path_for(key)
        self.ensure_structure()
        target.write_bytes(data)
        return len(data)

    def staging_key(self, extension: str) -> str:
        """Return a fresh key that cannot collide with any slot key."""
        return f"staging-{uuid.uuid4().hex}{extension}"

    def move(self, source_key: str, target_key: str) -> Path:
        target = self.path_for(target_key)
        os.replace(self.path_for(source_key), target)
        return target

    def open_object(self, key: str) -> StoredObject:
        """Return the blob stored under ``key``; metadata documents are not blobs."""
        path = self.path_for(key)
        if is_metadata_key(key) or not path.is_file():
            raise AssetNotFoundError(key)
        stat = path.stat()
        return StoredObject(key=key, path=path, size_bytes=stat.st_size, modified_at=stat.st_mtime)

    def list_objects(self) -> list[StoredObject]:
        if not self.root.exists():
            return []
        objects: list[StoredObject] = []
        for entry in sorted(self.root.iterdir()):
            # dot-files are in-flight metadata writes
            if not entry.is_file() or entry.name.startswith(".") or is_metadata_key(entry.name):
                continue
            stat = entry.stat()
            objects.append(
                StoredObject(
                    key=entry.name,
                    path=entry,
                    size_bytes=stat.st_size,
                    modified_at=stat.st_mtime,
                )
            )
        return objects

    def list_stem(self, stem: str) -> list[StoredObject]:
        """Return every blob whose key is ``stem`` with any extension."""
        return [obj for obj in self.list_objects() if matches_stem(obj.key, stem)]

    def delete_stem(self, stem: str) -> list[str]:
        removed: list[str] = []
        for obj in self.list_stem(stem):
            obj.path.unlink(missing_ok=True)
            removed.append(obj.key)
        if removed:
            self.log.info("storage.blobs.deleted", extra={"stem": stem, "keys": removed})
        return removed

    def delete_key(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    def read_document(self, name: str) -> str | None:
        path = self.path_for(name)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write_document(self, name: str, text: str) -> None:
        """Replace a metadata document atomically."""
        target = self.path_for(name)
        self.ensure_structure()
        scratch = self.root / f".{name}.{uuid.uuid4().hex}.tmp"
        scratch.write_text(text, encoding="utf-8")
        os.replace(scratch, target)
