#!/usr/bin/env python3
"""Dump the merged flood sensor data the library can fetch.

Fetches both sources (or reads the cache), then prints the summary stats,
the spatial grouping that a map would use, and optionally every sensor.

Usage
-----
::

    python scripts/dump_sensors.py

Options::

    --prefer-cache       Use a fresh cached result instead of fetching
    --cache-file FILE    Persist the cache in FILE (default: in memory)
    --sensors            Also print every sensor
    --json               Output as machine-readable JSON
    --output FILE        Write output to FILE instead of stdout
    --verbose            Enable debug logging

Optional ``FLOOD_*`` environment variables are honoured (see
``FloodSensorsConfig.from_env``).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyfloodsensors import FloodSensorsClient, FloodSensorsConfig, SpatialGrouper  # noqa: E402
from pyfloodsensors.rendering.style import format_depth, format_observed_at  # noqa: E402

# ── helpers ──────────────────────────────────────────────────


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Dump merged flood sensor data for debugging / development.",
    )
    parser.add_argument("--prefer-cache", action="store_true", help="Use a fresh cached result if available")
    parser.add_argument("--cache-file", help="Persist the cache in FILE (default: in memory)")
    parser.add_argument("--sensors", action="store_true", help="Also print every sensor")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    overrides: dict[str, Any] = {}
    if args.cache_file:
        overrides["cache_path"] = args.cache_file
    config = FloodSensorsConfig.from_env(**overrides)

    async with FloodSensorsClient(config) as client:
        data = await client.acquire_sensor_data(prefer_cache=args.prefer_cache)

    groups = SpatialGrouper().group(data.entities)
    result: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "origin": data.origin.value,
        "produced_at": data.produced_at.isoformat(),
        "error": data.error,
        "stats": data.stats.model_dump(),
        "grouping": {
            "cells": groups.bucket_count,
            "dense_cells": groups.dense_bucket_count,
            "dense": len(groups.dense),
            "sparse": len(groups.sparse),
        },
    }
    if args.sensors:
        result["sensors"] = [entity.model_dump(mode="json") for entity in data.entities]

    if args.json_mode or args.output:
        payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
        return

    out: list[str] = [_section("pyfloodsensors dump_sensors")]
    out.append(f"  time      : {result['timestamp']}")
    out.append(f"  origin    : {result['origin']} (produced {result['produced_at']})")
    if data.error:
        out.append(f"  error     : {data.error}")
    out.append(_section("STATS"))
    for key, value in result["stats"].items():
        out.append(f"  {key:<16}: {value}")
    out.append(_section("GROUPING"))
    for key, value in result["grouping"].items():
        out.append(f"  {key:<16}: {value}")
    if args.sensors:
        out.append(_section("SENSORS"))
        for entity in data.entities:
            out.append(
                f"  {entity.station_id or '-':<12} {entity.station_name or '-':<20} "
                f"{entity.latitude:9.5f} {entity.longitude:10.5f} "
                f"{format_depth(entity.depth, entity.unit):>10}  {format_observed_at(entity.observed_at)}"
            )
    print("\n".join(out))


if __name__ == "__main__":
    asyncio.run(main())
