"""High-level async client for the flood sensor feeds."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import aiohttp

from pyfloodsensors._api.paginated import PaginatedFetcher
from pyfloodsensors._api.query import default_jobs
from pyfloodsensors._transport import HttpTransport, Transport
from pyfloodsensors.aggregator import Aggregator
from pyfloodsensors.cache import CacheStore, FileCacheStore, MemoryCacheStore, NullCacheStore
from pyfloodsensors.config import FloodSensorsConfig
from pyfloodsensors.exceptions import FloodSensorsError
from pyfloodsensors.models.fetch import FetchJob
from pyfloodsensors.models.result import CacheEntry, MergedResult

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def build_cache_store(config: FloodSensorsConfig, *, clock: Callable[[], datetime] = _utcnow) -> CacheStore:
    """Cache backend selected by *config*."""
    if not config.cache_enabled:
        return NullCacheStore()
    max_age = timedelta(seconds=config.cache_max_age)
    if config.cache_path:
        return FileCacheStore(config.cache_path, max_age=max_age, clock=clock)
    return MemoryCacheStore(max_age=max_age, clock=clock)


class FloodSensorsClient:
    """Async client for the Water Resources Agency flood sensor feeds.

    Usage::

        async with FloodSensorsClient(config) as client:
            result = await client.acquire_sensor_data(prefer_cache=True)

    The cache outlives the HTTP session, so re-entering the same client keeps
    a warm cache.
    """

    def __init__(
        self,
        config: FloodSensorsConfig | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        cache: CacheStore | None = None,
        transport: Transport | None = None,
        jobs: tuple[FetchJob, ...] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._config = config or FloodSensorsConfig()
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport
        self._cache = cache if cache is not None else build_cache_store(self._config, clock=clock)
        self._jobs = jobs or default_jobs(self._config)
        self._clock = clock
        self._aggregator: Aggregator | None = None

    @property
    def config(self) -> FloodSensorsConfig:
        return self._config

    @property
    def cache(self) -> CacheStore:
        return self._cache

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FloodSensorsClient:
        transport = self._external_transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = HttpTransport(self._config, self._http_session)
        self._aggregator = Aggregator(
            PaginatedFetcher.from_config(transport, self._config),
            self._jobs,
            self._cache,
            clock=self._clock,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if self._aggregator is not None:
            self._aggregator.cancel()
            self._aggregator = None
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    def _require_aggregator(self) -> Aggregator:
        if self._aggregator is None:
            raise FloodSensorsError("Client not initialized. Use 'async with FloodSensorsClient(...) as client:'")
        return self._aggregator

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def acquire_sensor_data(self, prefer_cache: bool = True) -> MergedResult:
        """Return merged sensor data, from cache when allowed and fresh.

        Never raises for network or data problems; when neither live nor
        cached data is available the result is empty and ``error`` is set.
        """
        return await self._require_aggregator().run(prefer_cache=prefer_cache)

    def get_cached(self) -> CacheEntry | None:
        return self._cache.get()

    def clear_cache(self) -> None:
        self._cache.clear()


async def acquire_sensor_data(
    prefer_cache: bool = True,
    *,
    config: FloodSensorsConfig | None = None,
    cache: CacheStore | None = None,
) -> MergedResult:
    """One-shot entry point: open a client, acquire, close.

    Pass a long-lived *cache* (or a ``cache_path`` in *config*) for the cache
    to be useful across calls.
    """
    async with FloodSensorsClient(config, cache=cache) as client:
        return await client.acquire_sensor_data(prefer_cache=prefer_cache)
