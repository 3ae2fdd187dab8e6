"""Tests for grouped sums over tidy observations."""

from __future__ import annotations

import pandas as pd
import pytest

from fish_passage.analysis.aggregate import (
    aggregate_counts,
    apply_filters,
    counts_by_decade_species,
    counts_by_year_project,
    counts_by_year_species,
    counts_by_year_week,
    selector_options,
)
from fish_passage.analysis.tidy import tidy_observations
from fish_passage.schemas import FilterState


def tidy_frame(rows: list[tuple[str | None, str, int, int, float]]) -> pd.DataFrame:
    """Tidy-shaped frame from (project, species, year, week, count) tuples."""
    frame = pd.DataFrame(rows, columns=["project", "species", "year", "week", "adult_count"])
    frame["decade"] = (frame["year"] // 10) * 10
    return frame


@pytest.fixture
def tidy() -> pd.DataFrame:
    return tidy_frame(
        [
            ("Bonneville", "steelhead", 2000, 27, 10.0),
            ("Bonneville", "steelhead", 2000, 27, 5.0),
            ("Bonneville", "steelhead", 2000, 28, 7.0),
            ("Bonneville", "steelhead", 2001, 30, 2.0),
            ("Bonneville", "chinook", 2000, 27, 100.0),
            ("The Dalles", "steelhead", 2000, 27, 50.0),
            ("Bonneville", "steelhead", 2002, 27, 99.0),
            ("Bonneville", "steelhead", 1999, 27, 1.0),
        ]
    )


class TestApplyFilters:
    """Test selection filtering."""

    def test_no_filters(self, tidy: pd.DataFrame) -> None:
        assert len(apply_filters(tidy)) == len(tidy)
        assert len(apply_filters(tidy, FilterState())) == len(tidy)

    def test_project_and_species(self, tidy: pd.DataFrame) -> None:
        subset = apply_filters(tidy, FilterState(project="Bonneville", species="chinook"))
        assert subset["adult_count"].tolist() == [100.0]

    def test_year_bounds_inclusive(self, tidy: pd.DataFrame) -> None:
        subset = apply_filters(tidy, FilterState(year_min=2001, year_max=2002))
        assert sorted(subset["year"].unique().tolist()) == [2001, 2002]

    def test_open_year_bound(self, tidy: pd.DataFrame) -> None:
        subset = apply_filters(tidy, FilterState(year_max=1999))
        assert subset["year"].tolist() == [1999]


class TestAggregateCounts:
    """Test the grouped sum."""

    def test_selection_scenario(self, tidy: pd.DataFrame) -> None:
        filters = FilterState(project="Bonneville", species="steelhead", year_min=2000, year_max=2001)

        counts = aggregate_counts(tidy, ("year", "week"), filters)

        assert counts.to_dict("records") == [
            {"year": 2000, "week": 27, "adult_count": 15.0},
            {"year": 2000, "week": 28, "adult_count": 7.0},
            {"year": 2001, "week": 30, "adult_count": 2.0},
        ]

    def test_no_zero_fill(self, tidy: pd.DataFrame) -> None:
        filters = FilterState(project="Bonneville", species="steelhead", year_min=2000, year_max=2001)
        counts = aggregate_counts(tidy, ("year", "week"), filters)
        assert not ((counts["year"] == 2001) & (counts["week"] == 27)).any()

    def test_total_matches_filtered_sum(self, tidy: pd.DataFrame) -> None:
        filters = FilterState(species="steelhead")
        counts = aggregate_counts(tidy, ("project", "year"), filters)
        assert counts["adult_count"].sum() == apply_filters(tidy, filters)["adult_count"].sum()

    def test_sorted_by_keys(self, tidy: pd.DataFrame) -> None:
        counts = aggregate_counts(tidy, ("year",))
        assert counts["year"].tolist() == [1999, 2000, 2001, 2002]

    def test_null_counts_skipped(self) -> None:
        frame = tidy_frame(
            [("Bonneville", "coho", 2000, 40, float("nan")), ("Bonneville", "coho", 2000, 40, 4.0)]
        )
        counts = aggregate_counts(frame, ("year", "week"))
        assert counts["adult_count"].tolist() == [4.0]

    def test_null_group_dropped(self) -> None:
        frame = tidy_frame([(None, "coho", 2000, 40, 3.0), ("Bonneville", "coho", 2000, 40, 4.0)])
        counts = aggregate_counts(frame, ("project",))
        assert counts["project"].tolist() == ["Bonneville"]

    def test_empty_selection(self, tidy: pd.DataFrame) -> None:
        counts = aggregate_counts(tidy, ("year", "week"), FilterState(project="McNary"))
        assert counts.empty
        assert list(counts.columns) == ["year", "week", "adult_count"]

    def test_unknown_column_raises(self, tidy: pd.DataFrame) -> None:
        with pytest.raises(ValueError, match="unknown columns"):
            aggregate_counts(tidy, ("year", "river"))


class TestWeeklyBuckets:
    """Test weekly sums at calendar year boundaries."""

    def test_first_and_last_days_of_a_year_stay_apart(self) -> None:
        raw = pd.DataFrame(
            [["BON", "2019-01-02", "5"], ["BON", "2019-12-31", "7"]],
            columns=["Project", "Date", "Steelhead"],
            dtype=str,
        )

        counts = counts_by_year_week(tidy_observations(raw))

        assert counts.to_dict("records") == [
            {"year": 2019, "week": 1, "adult_count": 5.0},
            {"year": 2019, "week": 53, "adult_count": 7.0},
        ]


class TestShortcuts:
    """Test the named aggregations used by the charts."""

    def test_by_year_species(self, tidy: pd.DataFrame) -> None:
        counts = counts_by_year_species(tidy)
        row = counts[(counts["year"] == 2000) & (counts["species"] == "steelhead")]
        assert row["adult_count"].tolist() == [72.0]

    def test_by_year_project(self, tidy: pd.DataFrame) -> None:
        counts = counts_by_year_project(tidy, FilterState(year_min=2000, year_max=2000))
        assert counts.to_dict("records") == [
            {"year": 2000, "project": "Bonneville", "adult_count": 122.0},
            {"year": 2000, "project": "The Dalles", "adult_count": 50.0},
        ]

    def test_by_year_week(self, tidy: pd.DataFrame) -> None:
        counts = counts_by_year_week(tidy, FilterState(year_min=2002))
        assert counts.to_dict("records") == [{"year": 2002, "week": 27, "adult_count": 99.0}]

    def test_by_decade_species(self, tidy: pd.DataFrame) -> None:
        counts = counts_by_decade_species(tidy)
        assert counts[["decade", "species"]].values.tolist() == [
            [1990, "steelhead"],
            [2000, "chinook"],
            [2000, "steelhead"],
        ]


class TestSelectorOptions:
    """Test the choices offered to a UI layer."""

    def test_options(self, tidy: pd.DataFrame) -> None:
        assert selector_options(tidy) == {
            "projects": ["Bonneville", "The Dalles"],
            "species": ["chinook", "steelhead"],
            "year_min": 1999,
            "year_max": 2002,
        }

    def test_empty_frame(self) -> None:
        options = selector_options(tidy_frame([]))
        assert options["projects"] == []
        assert options["year_min"] is None
