"""Per-entity metadata aggregate: merge rules and JSON persistence."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable

from .media_errors import MetadataCorruptedError
from .media_models import AssetDescriptor
from .slot_naming import aggregate_name_for
from .slot_store import SlotStore


def merge_descriptors(
    existing: Iterable[AssetDescriptor],
    incoming: Iterable[AssetDescriptor],
) -> list[AssetDescriptor]:
    """
    Merge newly written descriptors into an entity aggregate.

    - Existing entries come first, then the incoming batch in its given order.
    - An entry whose position is already present replaces it in place, so the
      incoming batch wins ties and a later duplicate in the batch beats an
      earlier one.
    - The result holds one descriptor per position, sorted ascending.
    """
    result: list[AssetDescriptor] = []
    index: dict[int, int] = {}

    for descriptor in [*existing, *incoming]:
        if descriptor.position in index:
            result[index[descriptor.position]] = descriptor
        else:
            index[descriptor.position] = len(result)
            result.append(descriptor)

    return sorted(result, key=lambda item: item.position)


def remove_position(
    existing: Iterable[AssetDescriptor], position: int
) -> list[AssetDescriptor]:
    """Drop the descriptor at ``position``; ordering is preserved."""
    return sorted(
        (item for item in existing if item.position != position),
        key=lambda item: item.position,
    )


def descriptor_at(
    existing: Iterable[AssetDescriptor], position: int
) -> AssetDescriptor | None:
    for item in existing:
        if item.position == position:
            return item
    return None


@dataclass(slots=True)
class MetadataAggregateStore:
    """Read and rewrite ``{entityId}.json`` documents in a slot namespace."""

    store: SlotStore
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def read(self, entity_id: str) -> list[AssetDescriptor]:
        """Return the entity aggregate; a missing document is an empty aggregate."""
        raw = self.store.read_document(aggregate_name_for(entity_id))
        if raw is None:
            return []
        try:
            payload = json.loads(raw)
            if not isinstance(payload, list):
                raise ValueError("aggregate document must be a JSON array")
            return [AssetDescriptor.from_document(item) for item in payload]
        except (ValueError, TypeError, KeyError, AttributeError) as exc:
            raise MetadataCorruptedError(f"{entity_id}: {exc}") from exc

    def write(self, entity_id: str, descriptors: list[AssetDescriptor]) -> None:
        document = [item.to_document() for item in descriptors]
        self.store.write_document(
            aggregate_name_for(entity_id), json.dumps(document, indent=2)
        )
        self.log.info(
            "media.metadata.written",
            extra={"entity_id": entity_id, "entries": len(descriptors)},
        )

    def merge_and_write(
        self, entity_id: str, incoming: list[AssetDescriptor]
    ) -> list[AssetDescriptor]:
        """Read, merge ``incoming`` and rewrite; a corrupted base is replaced."""
        try:
            existing = self.read(entity_id)
        except MetadataCorruptedError as exc:
            self.log.warning(
                "media.metadata.corrupted",
                extra={"entity_id": entity_id, "error": str(exc)},
            )
            existing = []
        merged = merge_descriptors(existing, incoming)
        self.write(entity_id, merged)
        return merged

    def prune_and_write(self, entity_id: str, position: int) -> list[AssetDescriptor] | None:
        """Remove ``position`` from an existing aggregate; ``None`` if there is none."""
        if self.store.read_document(aggregate_name_for(entity_id)) is None:
            return None
        try:
            existing = self.read(entity_id)
        except MetadataCorruptedError as exc:
            self.log.warning(
                "media.metadata.corrupted",
                extra={"entity_id": entity_id, "error": str(exc)},
            )
            return None
        remaining = remove_position(existing, position)
        self.write(entity_id, remaining)
        return remaining
