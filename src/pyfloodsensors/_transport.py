"""HTTP transport for SensorThings JSON queries."""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import aiohttp

from pyfloodsensors.config import FloodSensorsConfig
from pyfloodsensors.exceptions import FloodTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the paginated fetcher.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    Timeouts are enforced by the caller, not the transport.
    """

    async def get_json(self, url: str) -> dict[str, Any]:
        ...


class HttpTransport:
    """aiohttp transport returning decoded JSON objects."""

    def __init__(self, config: FloodSensorsConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def get_json(self, url: str) -> dict[str, Any]:
        """GET *url* and return the decoded JSON object.

        Raises :class:`FloodTransportError` for network errors, non-200
        responses, undecodable bodies and bodies that are not a JSON object.
        """
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": self._config.user_agent,
        }

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(url, headers=headers) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise FloodTransportError(
                        f"HTTP {resp.status} from {url}: {text[:200]}",
                        status_code=resp.status,
                        url=url,
                    )
        except FloodTransportError:
            raise
        except aiohttp.ClientError as exc:
            raise FloodTransportError(f"Request to {url} failed: {exc}", url=url) from exc
        except UnicodeDecodeError as exc:
            raise FloodTransportError(f"Undecodable body from {url}: {exc}", url=url) from exc

        try:
            body: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FloodTransportError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

        if not isinstance(body, dict):
            raise FloodTransportError(f"Expected a JSON object from {url}", url=url)
        return body
