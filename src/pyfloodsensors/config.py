"""Client configuration for pyfloodsensors."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyfloodsensors._constants import (
    BASE_URL,
    BATCH_PAUSE_S,
    CACHE_MAX_AGE_S,
    CONCURRENCY_LIMIT,
    PAGE_SIZE,
    REQUEST_TIMEOUT_S,
    USER_AGENT,
)
from pyfloodsensors.exceptions import FloodConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise FloodConfigError(f"{env_key} must be numeric, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class FloodSensorsConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        SensorThings service root. Defaults to the Water Resources Agency
        mirror on ``sta.colife.org.tw``.
    page_size : int
        Records requested per page (``$top``).
    concurrency_limit : int
        Maximum number of page requests in flight at once per source.
    request_timeout : float
        Per-request timeout in seconds. A timed-out page counts as an
        empty page.
    batch_pause : float
        Pause in seconds between batches of concurrent page requests.
    cache_max_age : float
        Seconds a cached merged result stays valid.
    cache_path : str or None
        JSON file used to persist the cache on this device. ``None``
        keeps the cache in memory for the lifetime of the process.
    cache_enabled : bool
        Disable to bypass the cache entirely (reads miss, writes are
        dropped).
    user_agent : str
        User-Agent header sent with every request.
    """

    base_url: str = BASE_URL
    page_size: int = PAGE_SIZE
    concurrency_limit: int = CONCURRENCY_LIMIT
    request_timeout: float = REQUEST_TIMEOUT_S
    batch_pause: float = BATCH_PAUSE_S
    cache_max_age: float = CACHE_MAX_AGE_S
    cache_path: str | None = None
    cache_enabled: bool = True
    user_agent: str = USER_AGENT

    def __post_init__(self) -> None:
        if self.page_size <= 0:
            raise FloodConfigError(f"page_size must be positive, got {self.page_size}")
        if self.concurrency_limit <= 0:
            raise FloodConfigError(f"concurrency_limit must be positive, got {self.concurrency_limit}")
        if self.request_timeout <= 0:
            raise FloodConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.batch_pause < 0:
            raise FloodConfigError(f"batch_pause must not be negative, got {self.batch_pause}")
        if self.cache_max_age < 0:
            raise FloodConfigError(f"cache_max_age must not be negative, got {self.cache_max_age}")

    @classmethod
    def from_env(cls, **overrides: Any) -> FloodSensorsConfig:
        """Create configuration from environment variables.

        Reads optional ``FLOOD_*`` variables. Explicit keyword arguments
        override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        FloodSensorsConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "FLOOD_BASE_URL": "base_url",
            "FLOOD_CACHE_PATH": "cache_path",
            "FLOOD_USER_AGENT": "user_agent",
        }
        _ENV_NUMBER_MAP: dict[str, tuple[str, type[int] | type[float]]] = {
            "FLOOD_PAGE_SIZE": ("page_size", int),
            "FLOOD_CONCURRENCY_LIMIT": ("concurrency_limit", int),
            "FLOOD_REQUEST_TIMEOUT": ("request_timeout", float),
            "FLOOD_BATCH_PAUSE": ("batch_pause", float),
            "FLOOD_CACHE_MAX_AGE": ("cache_max_age", float),
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        for env_key, (field_name, cast) in _ENV_NUMBER_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                config_kwargs[field_name] = _env_number(env_key, val, cast)

        if "cache_enabled" not in overrides:
            config_kwargs["cache_enabled"] = _env_bool(env.get("FLOOD_CACHE_ENABLED"), True)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
