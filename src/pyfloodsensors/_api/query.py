"""SensorThings query construction for the two flood sensor sources.

Both sources query the same ``Datastreams`` collection and differ only in
the ``authority_type`` filter.
"""

from __future__ import annotations

import re

from pyfloodsensors._constants import DATASTREAM_CATEGORY, DATASTREAM_CATEGORY_TYPE
from pyfloodsensors.config import FloodSensorsConfig
from pyfloodsensors.models._base import AuthorityType
from pyfloodsensors.models.fetch import FetchJob

_SKIP_RE = re.compile(r"\$skip=\d+")
_TOP_RE = re.compile(r"\$top=\d+")

_SOURCE_NAMES: dict[AuthorityType, str] = {
    AuthorityType.PRIMARY: "wra",
    AuthorityType.JOINT: "joint",
}


def build_source_query(base_url: str, authority_type: AuthorityType, page_size: int) -> str:
    """Return the page-0 query for one source."""
    filter_expr = (
        "("
        f"(Thing/properties/authority_type eq '{authority_type.value}')"
        f" and substringof('Datastream_Category_type={DATASTREAM_CATEGORY_TYPE}',description)"
        f" and substringof('Datastream_Category={DATASTREAM_CATEGORY}',description)"
        ")"
    )
    expand_expr = (
        "Thing($expand=Locations;$orderby=@iot.id asc),"
        "Observations($top=1;$skip=0;$orderby=phenomenonTime desc,@iot.id asc)"
    )
    return (
        f"{base_url.rstrip('/')}/Datastreams"
        f"?$top={page_size}"
        "&$skip=0"
        f"&$filter={filter_expr}"
        f"&$expand={expand_expr}"
        "&$orderby=@iot.id asc"
        "&$count=true"
    )


def with_skip(query: str, skip: int) -> str:
    """Return *query* with its top-level ``$skip`` offset replaced.

    Only the first occurrence is replaced; the nested ``$skip`` inside the
    ``Observations`` expansion must stay at 0. A query without ``$skip`` gets
    one appended.
    """
    if _SKIP_RE.search(query):
        return _SKIP_RE.sub(f"$skip={skip}", query, count=1)
    separator = "&" if "?" in query else "?"
    return f"{query}{separator}$skip={skip}"


def with_top(query: str, top: int) -> str:
    if _TOP_RE.search(query):
        return _TOP_RE.sub(f"$top={top}", query, count=1)
    separator = "&" if "?" in query else "?"
    return f"{query}{separator}$top={top}"


def default_jobs(config: FloodSensorsConfig) -> tuple[FetchJob, FetchJob]:
    """Fetch jobs for the two sources, in merge order (primary first)."""
    return tuple(  # type: ignore[return-value]
        FetchJob(
            name=_SOURCE_NAMES[authority_type],
            authority_type=authority_type,
            base_query=build_source_query(config.base_url, authority_type, config.page_size),
            page_size=config.page_size,
        )
        for authority_type in (AuthorityType.PRIMARY, AuthorityType.JOINT)
    )
