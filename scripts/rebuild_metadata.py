"""Rebuild entity metadata aggregates from the blobs stored in the upload root."""

from __future__ import annotations

import argparse
import mimetypes
import sys
import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timezone

from image_service.config import load_config
from image_service.media.media_models import AssetDescriptor, StoredObject
from image_service.media.metadata_aggregate import MetadataAggregateStore, merge_descriptors
from image_service.media.slot_naming import is_safe_id
from image_service.media.slot_store import SlotStore


@dataclass(slots=True)
class RebuildSummary:
    entities: int
    descriptors_added: int
    skipped: int
    dry_run: bool


def parse_slot_key(key: str) -> tuple[str, int] | None:
    """Split ``{entityId}-{position}{ext}`` on the last dash before the final extension."""
    stem = key.rsplit(".", 1)[0]
    entity_id, sep, raw_position = stem.rpartition("-")
    if not sep or not is_safe_id(entity_id) or not raw_position.isdigit():
        return None
    return entity_id, int(raw_position)


def _descriptor_for(
    obj: StoredObject,
    entity_id: str,
    position: int,
    *,
    entity_type: str,
    company_id: str,
) -> AssetDescriptor:
    mime_type, _ = mimetypes.guess_type(obj.key)
    return AssetDescriptor(
        id=str(uuid.uuid4()),
        entity_id=entity_id,
        entity_type=entity_type,
        company_id=company_id,
        stored_name=obj.key,
        original_name=obj.key,
        mime_type=mime_type or "application/octet-stream",
        size_bytes=obj.size_bytes,
        position=position,
        created_at=datetime.fromtimestamp(obj.modified_at, tz=timezone.utc),
    )


def perform_rebuild(
    *,
    dry_run: bool,
    entity_type: str = "product",
    company_id: str = "default",
) -> RebuildSummary:
    """Add a descriptor for every slot blob missing from its entity aggregate."""
    config = load_config()
    store = SlotStore(config.media_paths.uploads)
    aggregates = MetadataAggregateStore(store)

    grouped: dict[str, list[tuple[int, StoredObject]]] = defaultdict(list)
    skipped = 0
    for obj in store.list_objects():
        parsed = None if obj.key.startswith("staging-") else parse_slot_key(obj.key)
        if parsed is None:
            skipped += 1
            continue
        entity_id, position = parsed
        grouped[entity_id].append((position, obj))

    added = 0
    for entity_id, slots in sorted(grouped.items()):
        existing = aggregates.read(entity_id)
        known = {item.position for item in existing}
        missing = [
            _descriptor_for(obj, entity_id, position, entity_type=entity_type, company_id=company_id)
            for position, obj in sorted(slots, key=lambda pair: (pair[0], pair[1].key))
            if position not in known
        ]
        # several extensions in one slot: keep the first, count the others
        unique: dict[int, AssetDescriptor] = {}
        for item in missing:
            if item.position in unique:
                skipped += 1
                continue
            unique[item.position] = item
        if not unique:
            continue
        added += len(unique)
        if not dry_run:
            aggregates.write(entity_id, merge_descriptors(existing, unique.values()))

    return RebuildSummary(
        entities=len(grouped),
        descriptors_added=added,
        skipped=skipped,
        dry_run=dry_run,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rebuild entity metadata aggregates from stored blobs.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without writing documents.")
    parser.add_argument("--entity-type", default="product", help="Entity type recorded for recovered entries.")
    parser.add_argument("--company-id", default="default", help="Company recorded for recovered entries.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        summary = perform_rebuild(
            dry_run=args.dry_run,
            entity_type=args.entity_type,
            company_id=args.company_id,
        )
    except Exception as exc:
        print(f"rebuild failed: {exc}", file=sys.stderr)
        return 2

    mode = "dry-run" if summary.dry_run else "done"
    print(
        f"rebuild {mode}, entities={summary.entities}, added={summary.descriptors_added}, skipped={summary.skipped}",
        file=sys.stdout,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
