from __future__ import annotations

import pytest

from pyfloodsensors.config import FloodSensorsConfig
from pyfloodsensors.exceptions import FloodConfigError

_ENV_KEYS = (
    "FLOOD_BASE_URL",
    "FLOOD_CACHE_PATH",
    "FLOOD_USER_AGENT",
    "FLOOD_PAGE_SIZE",
    "FLOOD_CONCURRENCY_LIMIT",
    "FLOOD_REQUEST_TIMEOUT",
    "FLOOD_BATCH_PAUSE",
    "FLOOD_CACHE_MAX_AGE",
    "FLOOD_CACHE_ENABLED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults() -> None:
    config = FloodSensorsConfig()

    assert config.page_size == 300
    assert config.concurrency_limit == 10
    assert config.request_timeout == 15.0
    assert config.batch_pause == 0.1
    assert config.cache_max_age == 180.0
    assert config.cache_path is None
    assert config.cache_enabled


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOOD_BASE_URL", "https://mirror.example.test/v1.0")
    monkeypatch.setenv("FLOOD_PAGE_SIZE", "100")
    monkeypatch.setenv("FLOOD_REQUEST_TIMEOUT", "2.5")
    monkeypatch.setenv("FLOOD_CACHE_PATH", "/tmp/flood.json")
    monkeypatch.setenv("FLOOD_CACHE_ENABLED", "off")

    config = FloodSensorsConfig.from_env()

    assert config.base_url == "https://mirror.example.test/v1.0"
    assert config.page_size == 100
    assert config.request_timeout == 2.5
    assert config.cache_path == "/tmp/flood.json"
    assert not config.cache_enabled


def test_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOOD_PAGE_SIZE", "100")
    monkeypatch.setenv("FLOOD_CACHE_ENABLED", "false")
    monkeypatch.setenv("FLOOD_USER_AGENT", "env-agent")

    config = FloodSensorsConfig.from_env(page_size=50, cache_enabled=True, user_agent="explicit")

    assert config.page_size == 50
    assert config.cache_enabled
    assert config.user_agent == "explicit"


def test_override_skips_invalid_env_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOOD_PAGE_SIZE", "lots")

    assert FloodSensorsConfig.from_env(page_size=10).page_size == 10


def test_non_numeric_env_value_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOOD_CONCURRENCY_LIMIT", "ten")

    with pytest.raises(FloodConfigError, match="FLOOD_CONCURRENCY_LIMIT"):
        FloodSensorsConfig.from_env()


def test_unrecognised_bool_keeps_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FLOOD_CACHE_ENABLED", "maybe")

    assert FloodSensorsConfig.from_env().cache_enabled


@pytest.mark.parametrize(
    "kwargs",
    [
        {"page_size": 0},
        {"concurrency_limit": -1},
        {"request_timeout": 0},
        {"batch_pause": -0.1},
        {"cache_max_age": -1},
    ],
)
def test_invalid_values_rejected(kwargs: dict) -> None:
    with pytest.raises(FloodConfigError):
        FloodSensorsConfig(**kwargs)


def test_config_is_frozen() -> None:
    config = FloodSensorsConfig()

    with pytest.raises(AttributeError):
        config.page_size = 1  # type: ignore[misc]
