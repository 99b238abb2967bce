"""Company ownership checks for slot mutations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .asset_cache import AssetCache, slot_cache_key
from .media_errors import OwnershipMismatchError
from .metadata_aggregate import MetadataAggregateStore, descriptor_at


@dataclass(slots=True)
class AuthorizationGuard:
    """Compare the caller's company with the recorded owner of a slot.

    By default only a warm cache entry is consulted: a cold slot is allowed.
    With ``read_through`` a cache miss falls back to the entity aggregate and
    re-warms the cache; slots absent from the aggregate are still allowed.
    """

    cache: AssetCache
    aggregates: MetadataAggregateStore | None = None
    read_through: bool = False
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def check(self, company_id: str, entity_id: str, position: int) -> None:
        key = slot_cache_key(entity_id, position)
        owner = self.cache.get(key)
        if owner is None and self.read_through and self.aggregates is not None:
            owner = descriptor_at(self.aggregates.read(entity_id), position)
            if owner is not None:
                self.cache.set(key, owner)

        if owner is None:
            self.log.debug(
                "media.authorization.cold_slot",
                extra={"entity_id": entity_id, "position": position},
            )
            return

        if owner.company_id != company_id:
            self.log.warning(
                "media.authorization.denied",
                extra={
                    "entity_id": entity_id,
                    "position": position,
                    "company_id": company_id,
                },
            )
            raise OwnershipMismatchError(f"{entity_id}:{position}")
