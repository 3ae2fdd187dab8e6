"""Consolidation, reshaping and aggregation of fetched DART tables.

Dependency rule: analysis/ imports datasource *models* only.  It never
fetches data, writes files, or produces HTML.

Modules:
  - consolidate: fetch outcomes -> one raw table (+ schema mismatch report)
  - tidy: raw table -> tidy observations with calendar fields and run labels
  - aggregate: tidy observations + FilterState -> grouped sums
"""

from fish_passage.analysis.aggregate import (
    aggregate_counts,
    apply_filters,
    counts_by_decade_species,
    counts_by_year_project,
    counts_by_year_species,
    counts_by_year_week,
    selector_options,
)
from fish_passage.analysis.consolidate import ConsolidatedRecord, SchemaMismatch, consolidate
from fish_passage.analysis.tidy import tidy_observations

__all__ = [
    "ConsolidatedRecord",
    "SchemaMismatch",
    "aggregate_counts",
    "apply_filters",
    "consolidate",
    "counts_by_decade_species",
    "counts_by_year_project",
    "counts_by_year_species",
    "counts_by_year_week",
    "selector_options",
    "tidy_observations",
]
