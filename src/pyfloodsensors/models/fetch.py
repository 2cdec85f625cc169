"""Paginated fetch job description and outcome."""

from __future__ import annotations

import math
from typing import Any

from pydantic import Field

from pyfloodsensors._constants import PAGE_SIZE
from pyfloodsensors.models._base import AuthorityType, FloodBaseModel


class FetchJob(FloodBaseModel):
    """One logical data source to be fetched page by page.

    ``base_query`` is a full URL containing ``$top`` and ``$skip``
    parameters; the fetcher substitutes the skip offset per page.
    """

    name: str
    authority_type: AuthorityType
    base_query: str
    page_size: int = Field(default=PAGE_SIZE, gt=0)

    def total_pages(self, total_count: int) -> int:
        return max(1, math.ceil(total_count / self.page_size))


class SourceFetchResult(FloodBaseModel):
    """Raw records gathered for one job, with paging bookkeeping."""

    job_name: str
    records: tuple[Any, ...] = ()
    total_count: int | None = None
    pages_requested: int = 0
    pages_failed: int = 0
    cancelled: bool = False
