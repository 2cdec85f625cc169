"""Merged pipeline result and its cached form."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import Field, computed_field

from pyfloodsensors.models._base import AuthorityType, FloodBaseModel, ResultOrigin
from pyfloodsensors.models.sensor import SensorEntity


class SensorStats(FloodBaseModel):
    """Summary counts over a set of sensors.

    Always derived with :meth:`from_entities`; ``total`` equals
    ``primary_count + joint_count`` and ``with_reading + without_reading``.
    """

    total: int = 0
    primary_count: int = 0
    joint_count: int = 0
    with_reading: int = 0
    without_reading: int = 0

    @classmethod
    def from_entities(cls, entities: Iterable[SensorEntity]) -> SensorStats:
        total = primary = joint = with_reading = 0
        for entity in entities:
            total += 1
            if entity.authority_type is AuthorityType.PRIMARY:
                primary += 1
            else:
                joint += 1
            if entity.has_reading:
                with_reading += 1
        return cls(
            total=total,
            primary_count=primary,
            joint_count=joint,
            with_reading=with_reading,
            without_reading=total - with_reading,
        )


class CacheEntry(FloodBaseModel):
    """Last successful merged result, as persisted by a cache store."""

    entities: tuple[SensorEntity, ...] = ()
    stats: SensorStats = Field(default_factory=SensorStats)
    stored_at: datetime

    def age_seconds(self, now: datetime) -> float:
        return (now - self.stored_at).total_seconds()


class MergedResult(FloodBaseModel):
    """Output of one pipeline run.

    ``stats`` is computed from ``entities`` and cannot be set. ``error`` is
    only populated when neither live data nor a cached result was available.
    """

    entities: tuple[SensorEntity, ...] = ()
    produced_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    origin: ResultOrigin = ResultOrigin.LIVE
    error: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def stats(self) -> SensorStats:
        return SensorStats.from_entities(self.entities)

    @property
    def is_empty(self) -> bool:
        return not self.entities

    @classmethod
    def empty(cls, *, error: str | None = None, produced_at: datetime | None = None) -> MergedResult:
        return cls(
            entities=(),
            produced_at=produced_at or datetime.now(UTC),
            origin=ResultOrigin.LIVE,
            error=error,
        )

    @classmethod
    def from_cache_entry(cls, entry: CacheEntry) -> MergedResult:
        return cls(entities=entry.entities, produced_at=entry.stored_at, origin=ResultOrigin.CACHE)

    def to_cache_entry(self, stored_at: datetime) -> CacheEntry:
        return CacheEntry(entities=self.entities, stats=self.stats, stored_at=stored_at)
