from pathlib import Path

import pytest

from image_service.media.asset_cache import AssetCache
from image_service.media.authorization import AuthorizationGuard
from image_service.media.media_errors import OwnershipMismatchError
from image_service.media.metadata_aggregate import MetadataAggregateStore
from image_service.media.slot_store import SlotStore
from tests.helpers.media import make_descriptor


def test_cold_slot_is_allowed() -> None:
    guard = AuthorizationGuard(cache=AssetCache())

    guard.check("C2", "E1", 0)


def test_warm_slot_owned_by_caller_is_allowed() -> None:
    cache = AssetCache()
    cache.set("E1:0", make_descriptor(company_id="C1"))

    AuthorizationGuard(cache=cache).check("C1", "E1", 0)


def test_warm_slot_owned_by_other_company_is_denied() -> None:
    cache = AssetCache()
    cache.set("E1:0", make_descriptor(company_id="C1"))

    with pytest.raises(OwnershipMismatchError):
        AuthorizationGuard(cache=cache).check("C2", "E1", 0)


def test_expired_entry_is_treated_as_cold() -> None:
    now = [0.0]
    cache = AssetCache(ttl_seconds=10, clock=lambda: now[0])
    cache.set("E1:0", make_descriptor(company_id="C1"))
    now[0] = 11.0

    AuthorizationGuard(cache=cache).check("C2", "E1", 0)


def test_read_through_consults_aggregate_and_rewarms(tmp_path: Path) -> None:
    aggregates = MetadataAggregateStore(SlotStore(tmp_path))
    aggregates.write("E1", [make_descriptor("E1", 0, company_id="C1")])
    cache = AssetCache()
    guard = AuthorizationGuard(cache=cache, aggregates=aggregates, read_through=True)

    with pytest.raises(OwnershipMismatchError):
        guard.check("C2", "E1", 0)

    assert cache.get("E1:0").company_id == "C1"


def test_read_through_allows_slot_missing_from_aggregate(tmp_path: Path) -> None:
    aggregates = MetadataAggregateStore(SlotStore(tmp_path))
    aggregates.write("E1", [make_descriptor("E1", 0, company_id="C1")])
    guard = AuthorizationGuard(cache=AssetCache(), aggregates=aggregates, read_through=True)

    guard.check("C2", "E1", 5)
