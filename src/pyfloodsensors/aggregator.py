"""Fetch both sources, validate, merge and cache.

State machine for one :meth:`Aggregator.run`::

    START ─ prefer_cache ─▶ CHECK_CACHE ─ hit ──▶ DONE(CACHE)
      │                          │
      │                         miss
      ▼                          ▼
    FETCH ◀──────────────────────┘
      ├─ ok ─────────────────────────────────────▶ DONE(LIVE), cache written
      └─ failure ─▶ CHECK_CACHE ─ hit ───────────▶ DONE(CACHE)
                         └──── miss ─────────────▶ DONE(LIVE), empty + error

Only one fetch runs at a time: starting a new one cancels the token of the
previous run, which then returns what it had without touching the cache.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import UTC, datetime

from pyfloodsensors._api.paginated import PaginatedFetcher
from pyfloodsensors.cache import CacheStore
from pyfloodsensors.cancel import CancellationToken
from pyfloodsensors.exceptions import SourceFetchError
from pyfloodsensors.ingestion.validator import RecordValidator
from pyfloodsensors.models.fetch import FetchJob, SourceFetchResult
from pyfloodsensors.models.result import MergedResult
from pyfloodsensors.models.sensor import SensorEntity

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Aggregator:
    """Single-flight acquisition pipeline over a fixed set of fetch jobs.

    Jobs are merged in the order given, regardless of which finishes first.
    """

    def __init__(
        self,
        fetcher: PaginatedFetcher,
        jobs: Sequence[FetchJob],
        cache: CacheStore,
        *,
        validator: RecordValidator | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not jobs:
            raise ValueError("at least one fetch job is required")
        self._fetcher = fetcher
        self._jobs = tuple(jobs)
        self._cache = cache
        self._validator = validator or RecordValidator()
        self._clock = clock
        self._active_token: CancellationToken | None = None

    @property
    def jobs(self) -> tuple[FetchJob, ...]:
        return self._jobs

    def cancel(self) -> None:
        """Cancel the outstanding fetch, if any."""
        if self._active_token is not None:
            self._active_token.cancel()

    def _from_cache(self) -> MergedResult | None:
        entry = self._cache.get()
        if entry is None:
            return None
        return MergedResult.from_cache_entry(entry)

    async def run(self, prefer_cache: bool = True) -> MergedResult:
        """Produce a merged result. Never raises for data or network problems."""
        if prefer_cache:
            cached = self._from_cache()
            if cached is not None:
                _logger.info("Using cached sensors (%d)", cached.stats.total)
                return cached

        if self._active_token is not None:
            _logger.debug("Superseding the previous fetch")
            self._active_token.cancel()
        token = CancellationToken()
        self._active_token = token

        try:
            result = await self._fetch_and_merge(token)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            _logger.error("Sensor fetch failed: %s", exc, exc_info=not isinstance(exc, SourceFetchError))
            cached = self._from_cache()
            if cached is not None:
                _logger.info("Falling back to cached sensors (%d)", cached.stats.total)
                return cached
            return MergedResult.empty(error=str(exc) or type(exc).__name__, produced_at=self._clock())
        finally:
            if self._active_token is token:
                self._active_token = None

        if token.cancelled:
            _logger.info("Fetch superseded; returning %d partial sensor(s) without caching", result.stats.total)
            return result

        self._cache.put(result.to_cache_entry(stored_at=result.produced_at))
        _logger.info("Sensor fetch complete: %s", result.stats.model_dump())
        return result

    async def _fetch_and_merge(self, token: CancellationToken) -> MergedResult:
        outcomes = await asyncio.gather(
            *(self._fetcher.fetch(job, token) for job in self._jobs),
            return_exceptions=True,
        )

        fetched: list[tuple[FetchJob, SourceFetchResult]] = []
        failures: list[BaseException] = []
        for job, outcome in zip(self._jobs, outcomes, strict=True):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                _logger.warning("%s: source unavailable: %s", job.name, outcome)
                failures.append(outcome)
                continue
            fetched.append((job, outcome))

        if not fetched:
            if len(failures) == 1:
                raise failures[0]
            raise SourceFetchError(
                "all sources failed: " + "; ".join(str(exc) for exc in failures),
                source=",".join(job.name for job in self._jobs),
            )

        entities: list[SensorEntity] = []
        for job, outcome in fetched:
            entities.extend(self._validator.validate_many(outcome.records, job.authority_type))

        return MergedResult(entities=tuple(entities), produced_at=self._clock())
