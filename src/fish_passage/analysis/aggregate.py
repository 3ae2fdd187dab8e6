"""Grouped sums over tidy observations.

Everything here is pure: tidy DataFrame (+ optional ``FilterState``) in,
small aggregate DataFrame out.  Only groups present in the filtered data
are returned; there is no zero-filling of missing weeks or years.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pandas as pd

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fish_passage.schemas import FilterState


def apply_filters(tidy: pd.DataFrame, filters: FilterState | None = None) -> pd.DataFrame:
    """Rows of ``tidy`` matching the project, species and year bounds in ``filters``."""
    if filters is None:
        return tidy
    mask = pd.Series(True, index=tidy.index)
    if filters.project is not None:
        mask &= tidy["project"] == filters.project
    if filters.species is not None:
        mask &= tidy["species"] == filters.species
    if filters.year_min is not None:
        mask &= tidy["year"] >= filters.year_min
    if filters.year_max is not None:
        mask &= tidy["year"] <= filters.year_max
    return tidy.loc[mask]


def aggregate_counts(
    tidy: pd.DataFrame,
    by: Sequence[str] = ("year", "week"),
    filters: FilterState | None = None,
) -> pd.DataFrame:
    """
    Sum ``adult_count`` over the ``by`` dimensions after filtering.

    Null counts are skipped.  Rows with a null grouping value (e.g. a
    missing project) are left out.

    Returns:
        DataFrame with the ``by`` columns plus ``adult_count``, sorted by ``by``.
    """
    keys = list(by)
    missing = [k for k in keys if k not in tidy.columns]
    if missing:
        msg = f"cannot group by unknown columns: {missing}"
        raise ValueError(msg)

    subset = apply_filters(tidy, filters)
    return subset.groupby(keys, sort=True, dropna=True)["adult_count"].sum().reset_index()


def counts_by_year_species(tidy: pd.DataFrame, filters: FilterState | None = None) -> pd.DataFrame:
    return aggregate_counts(tidy, ("year", "species"), filters)


def counts_by_year_project(tidy: pd.DataFrame, filters: FilterState | None = None) -> pd.DataFrame:
    return aggregate_counts(tidy, ("year", "project"), filters)


def counts_by_year_week(tidy: pd.DataFrame, filters: FilterState | None = None) -> pd.DataFrame:
    return aggregate_counts(tidy, ("year", "week"), filters)


def counts_by_decade_species(
    tidy: pd.DataFrame, filters: FilterState | None = None
) -> pd.DataFrame:
    return aggregate_counts(tidy, ("decade", "species"), filters)


def selector_options(tidy: pd.DataFrame) -> dict[str, Any]:
    """Choices a UI layer can offer: projects, species, and the year span."""
    years = tidy["year"]
    return {
        "projects": sorted(tidy["project"].dropna().unique().tolist()),
        "species": sorted(tidy["species"].dropna().unique().tolist()),
        "year_min": int(years.min()) if not years.empty else None,
        "year_max": int(years.max()) if not years.empty else None,
    }
