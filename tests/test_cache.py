from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from fakes import FakeClock, make_entity
from pyfloodsensors.cache import FileCacheStore, MemoryCacheStore, NullCacheStore
from pyfloodsensors.models import AuthorityType, CacheEntry, MergedResult


def _entry(clock: FakeClock, count: int = 3) -> CacheEntry:
    entities = tuple(
        make_entity(station_id=f"S-{i}", authority_type=AuthorityType.JOINT if i % 2 else AuthorityType.PRIMARY)
        for i in range(count)
    )
    return MergedResult(entities=entities, produced_at=clock()).to_cache_entry(stored_at=clock())


def test_fresh_entry_is_returned(clock: FakeClock) -> None:
    store = MemoryCacheStore(clock=clock)
    entry = _entry(clock)
    store.put(entry)

    clock.advance(179.999)
    cached = store.get()

    assert cached is not None
    assert cached.entities == entry.entities
    assert cached.stats.total == 3
    assert cached.stats.primary_count == 2


def test_entry_expires_at_max_age(clock: FakeClock) -> None:
    store = MemoryCacheStore(clock=clock)
    store.put(_entry(clock))

    clock.advance(180)

    assert store.get() is None


def test_expired_entry_is_evicted(clock: FakeClock) -> None:
    store = MemoryCacheStore(clock=clock)
    store.put(_entry(clock))
    clock.advance(200)
    assert store.get() is None

    # Winding the clock back does not resurrect it.
    clock.advance(-200)
    assert store.get() is None


def test_custom_max_age(clock: FakeClock) -> None:
    store = MemoryCacheStore(max_age=timedelta(seconds=10), clock=clock)
    store.put(_entry(clock))

    clock.advance(9)
    assert store.get() is not None
    clock.advance(1)
    assert store.get() is None


def test_empty_store_misses(clock: FakeClock) -> None:
    assert MemoryCacheStore(clock=clock).get() is None


def test_clear_removes_entry(clock: FakeClock) -> None:
    store = MemoryCacheStore(clock=clock)
    store.put(_entry(clock))

    store.clear()

    assert store.get() is None


@pytest.mark.parametrize(
    "payload",
    [
        "{not json",
        '{"entities": "nope", "storedAt": "2026-01-01T00:00:00Z"}',
        '{"entities": []}',
        '{"entities": [], "storedAt": "2026-01-01T00:00:00"}',
        "[]",
    ],
    ids=["invalid-json", "wrong-type", "missing-timestamp", "naive-timestamp", "array"],
)
def test_corrupt_payload_is_a_miss(clock: FakeClock, payload: str) -> None:
    store = MemoryCacheStore(clock=clock)
    store._payload = payload

    assert store.get() is None


class _FailingWriteStore(MemoryCacheStore):
    def _write_raw(self, payload: str) -> None:
        raise OSError("quota exceeded")


def test_put_failure_clears_and_does_not_raise(clock: FakeClock) -> None:
    store = _FailingWriteStore(clock=clock)
    store._payload = _entry(clock).model_dump_json()

    store.put(_entry(clock, count=5))

    assert store.get() is None


def test_file_store_persists_across_instances(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "nested" / "sensors.json"
    FileCacheStore(path, clock=clock).put(_entry(clock))

    cached = FileCacheStore(path, clock=clock).get()

    assert cached is not None
    assert cached.stats.total == 3
    assert not path.with_name("sensors.json.tmp").exists()


def test_file_store_corrupt_file_is_a_miss(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "sensors.json"
    path.write_bytes(b"\xff\xfe garbage")

    assert FileCacheStore(path, clock=clock).get() is None


def test_file_store_clear_deletes_file(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "sensors.json"
    store = FileCacheStore(path, clock=clock)
    store.put(_entry(clock))

    store.clear()
    store.clear()

    assert not path.exists()


def test_file_store_expiry_deletes_file(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "sensors.json"
    store = FileCacheStore(path, clock=clock)
    store.put(_entry(clock))

    clock.advance(181)

    assert store.get() is None
    assert not path.exists()


def test_null_store_never_hits(clock: FakeClock) -> None:
    store = NullCacheStore()
    store.put(_entry(clock))

    assert store.get() is None
