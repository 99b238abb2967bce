from image_service.media.asset_cache import AssetCache, logo_cache_key, slot_cache_key
from tests.helpers.media import make_descriptor


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_cache_keys() -> None:
    assert slot_cache_key("E1", 0) == "E1:0"
    assert logo_cache_key("C1") == "logo:C1"


def test_entry_is_returned_before_expiry() -> None:
    clock = FakeClock()
    cache = AssetCache(ttl_seconds=60, clock=clock)
    descriptor = make_descriptor()
    cache.set("E1:0", descriptor)

    clock.now += 59

    assert cache.get("E1:0") is descriptor


def test_expired_entry_is_absent_before_sweep() -> None:
    clock = FakeClock()
    cache = AssetCache(ttl_seconds=60, clock=clock)
    cache.set("E1:0", make_descriptor())

    clock.now += 60

    assert cache.get("E1:0") is None
    assert len(cache) == 0


def test_reads_do_not_extend_expiry() -> None:
    clock = FakeClock()
    cache = AssetCache(ttl_seconds=60, clock=clock)
    cache.set("E1:0", make_descriptor())

    clock.now += 30
    assert cache.get("E1:0") is not None
    clock.now += 31

    assert cache.get("E1:0") is None


def test_set_overwrites_and_restarts_ttl() -> None:
    clock = FakeClock()
    cache = AssetCache(ttl_seconds=60, clock=clock)
    cache.set("E1:0", make_descriptor(company_id="C1"))
    clock.now += 50
    replacement = make_descriptor(company_id="C2")
    cache.set("E1:0", replacement)
    clock.now += 50

    assert cache.get("E1:0") is replacement


def test_sweep_removes_only_expired_entries() -> None:
    clock = FakeClock()
    cache = AssetCache(ttl_seconds=60, clock=clock)
    cache.set("E1:0", make_descriptor("E1", 0))
    clock.now += 30
    cache.set("E1:1", make_descriptor("E1", 1))
    clock.now += 40

    assert cache.sweep() == 1
    assert len(cache) == 1
    assert cache.get("E1:1") is not None


def test_delete_reports_presence() -> None:
    cache = AssetCache()
    cache.set("E1:0", make_descriptor())

    assert cache.delete("E1:0") is True
    assert cache.delete("E1:0") is False
