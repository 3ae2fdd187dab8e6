"""DART adult fish passage data source.

Columbia Basin Research publishes daily adult counts per dam as HTML
reports, one page per (year, project) query.

Public API:
  - catalog: load_sites, parse_sites
  - queries: QueryTarget generation (build_query_targets, iter_query_targets)
  - fetch: fetch_target, fetch_targets, summarize_outcomes
  - tables: parse_table
  - models: RawTable, Present, Absent, AbsentReason
"""

from fish_passage.datasources.dart.catalog import load_sites, parse_sites
from fish_passage.datasources.dart.client import CATALOG_URL, QUERY_TEMPLATE, SPECIES_COLUMNS
from fish_passage.datasources.dart.fetch import fetch_target, fetch_targets, summarize_outcomes
from fish_passage.datasources.dart.models import (
    Absent,
    AbsentReason,
    FetchOutcome,
    Present,
    RawTable,
)
from fish_passage.datasources.dart.queries import (
    build_query_targets,
    iter_query_targets,
    query_url,
)
from fish_passage.datasources.dart.tables import TableParseError, parse_table

__all__ = [
    "CATALOG_URL",
    "QUERY_TEMPLATE",
    "SPECIES_COLUMNS",
    "Absent",
    "AbsentReason",
    "FetchOutcome",
    "Present",
    "RawTable",
    "TableParseError",
    "build_query_targets",
    "fetch_target",
    "fetch_targets",
    "iter_query_targets",
    "load_sites",
    "parse_sites",
    "parse_table",
    "query_url",
    "summarize_outcomes",
]
