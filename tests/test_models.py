from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from fakes import make_entity, make_job
from pyfloodsensors.cancel import CancellationToken, RenderRun
from pyfloodsensors.models import AuthorityType, MergedResult, ResultOrigin, SensorEntity, SensorStats
from pyfloodsensors.models._base import parse_observation_time


def test_stats_from_entities() -> None:
    entities = [
        make_entity(station_id="a", depth=1.0),
        make_entity(station_id="b", depth=None),
        make_entity(station_id="c", authority_type=AuthorityType.JOINT, depth=0.0),
    ]

    stats = SensorStats.from_entities(entities)

    assert stats == SensorStats(total=3, primary_count=2, joint_count=1, with_reading=2, without_reading=1)


def test_merged_result_stats_follow_entities() -> None:
    result = MergedResult(entities=(make_entity(), make_entity(authority_type=AuthorityType.JOINT)))

    assert result.stats.total == 2
    assert result.model_dump()["stats"]["joint_count"] == 1
    assert result.origin is ResultOrigin.LIVE
    assert not result.is_empty


def test_cache_entry_round_trip_keeps_origin_semantics() -> None:
    stored_at = datetime(2026, 1, 1, tzinfo=UTC)
    entry = MergedResult(entities=(make_entity(),)).to_cache_entry(stored_at=stored_at)

    restored = MergedResult.from_cache_entry(entry)

    assert restored.origin is ResultOrigin.CACHE
    assert restored.produced_at == stored_at
    assert restored.error is None
    assert entry.age_seconds(stored_at + timedelta(seconds=42)) == 42


def test_entity_outside_bounding_box_rejected() -> None:
    with pytest.raises(ValidationError):
        make_entity(lat=35.6, lon=139.7)


def test_entity_accepts_camel_case_keys() -> None:
    entity = SensorEntity.model_validate(
        {"stationId": "x", "authorityType": AuthorityType.PRIMARY.value, "latitude": 25.0, "longitude": 121.5}
    )

    assert entity.station_id == "x"
    assert entity.authority_type is AuthorityType.PRIMARY


def test_entity_is_frozen() -> None:
    entity = make_entity()

    with pytest.raises(ValidationError):
        entity.depth = 5.0  # type: ignore[misc]


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        ("", None),
        ("2025-07-01T08:10:00Z", datetime(2025, 7, 1, 8, 10, tzinfo=UTC)),
        ("2025-07-01T16:10:00+08:00", datetime(2025, 7, 1, 8, 10, tzinfo=UTC)),
        ("2025-07-01T08:10:00", datetime(2025, 7, 1, 8, 10, tzinfo=UTC)),
        (1751357400, datetime(2025, 7, 1, 8, 10, tzinfo=UTC)),
        (datetime(2025, 7, 1, 16, 10, tzinfo=timezone(timedelta(hours=8))), datetime(2025, 7, 1, 8, 10, tzinfo=UTC)),
    ],
)
def test_parse_observation_time(value: object, expected: datetime | None) -> None:
    assert parse_observation_time(value) == expected


@pytest.mark.parametrize("value", ["not a date", True, [2025]])
def test_parse_observation_time_rejects(value: object) -> None:
    with pytest.raises(ValueError):
        parse_observation_time(value)


@pytest.mark.parametrize(("total", "pages"), [(0, 1), (1, 1), (300, 1), (301, 2), (3001, 11)])
def test_total_pages(total: int, pages: int) -> None:
    assert make_job().total_pages(total) == pages


@pytest.mark.asyncio
async def test_cancellation_token_wakes_waiters() -> None:
    token = CancellationToken()
    waiter = asyncio.ensure_future(token.wait())
    await asyncio.sleep(0)
    assert not waiter.done()

    token.cancel()
    token.cancel()
    await asyncio.wait_for(waiter, timeout=1.0)

    assert token.cancelled


def test_render_run_flag() -> None:
    run = RenderRun(label="live")
    assert not run.cancelled

    run.cancel()

    assert run.cancelled
    assert "live" in repr(run)
