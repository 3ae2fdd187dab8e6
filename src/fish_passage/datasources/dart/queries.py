"""Query target generation: one DART URL per (year, site)."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from fish_passage.datasources.dart.client import QUERY_TEMPLATE
from fish_passage.schemas import QueryTarget, Site

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


def query_url(year: int, site: str, template: str = QUERY_TEMPLATE) -> str:
    """Substitute a year and site code into the query template."""
    return template.format(year=year, site=quote(site, safe=""))


def iter_query_targets(
    sites: Iterable[Site | str],
    year_min: int,
    year_max: int,
    *,
    template: str = QUERY_TEMPLATE,
) -> Iterator[QueryTarget]:
    """
    Yield the dense year x site grid of query targets.

    Years are the outer loop and sites the inner loop, so the order is
    stable across runs.  An inverted range yields nothing.
    """
    codes = [s.code if isinstance(s, Site) else s for s in sites]
    for year in range(year_min, year_max + 1):
        for code in codes:
            yield QueryTarget(year=year, site=code, url=query_url(year, code, template))


def build_query_targets(
    sites: Iterable[Site | str],
    year_min: int,
    year_max: int,
    *,
    template: str = QUERY_TEMPLATE,
) -> list[QueryTarget]:
    """Materialized ``iter_query_targets``."""
    return list(iter_query_targets(sites, year_min, year_max, template=template))
