"""Static report charts.

Each function aggregates the tidy observations and returns a Plotly figure.
Colors for species are fixed by ``SPECIES_COLORS`` so every chart agrees.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import plotly.express as px

from fish_passage.analysis.aggregate import (
    aggregate_counts,
    counts_by_decade_species,
    counts_by_year_project,
    counts_by_year_species,
)
from fish_passage.datasources.dart.client import SPECIES_COLUMNS

if TYPE_CHECKING:
    import pandas as pd
    import plotly.graph_objects as go

_PALETTE = [
    "#1f77b4",  # blue
    "#ff7f0e",  # orange
    "#2ca02c",  # green
    "#d62728",  # red
    "#9467bd",  # purple
    "#8c564b",  # brown
    "#e377c2",  # pink
    "#7f7f7f",  # gray
    "#bcbd22",  # olive
    "#17becf",  # cyan
    "#393b79",  # navy
]

SPECIES_COLORS = {s: _PALETTE[i % len(_PALETTE)] for i, s in enumerate(SPECIES_COLUMNS)}

_LAYOUT = {
    "template": "plotly_white",
    "height": 420,
    "margin": {"l": 60, "r": 20, "t": 60, "b": 40},
    "legend_title_text": "",
}


def species_label(species: str) -> str:
    """``"jack_chinook"`` -> ``"Jack Chinook"``."""
    return species.replace("_", " ").title()


def annual_species_figure(tidy: pd.DataFrame) -> go.Figure:
    """Stacked bars of yearly counts, one color per species."""
    counts = counts_by_year_species(tidy)
    fig = px.bar(
        counts,
        x="year",
        y="adult_count",
        color="species",
        color_discrete_map=SPECIES_COLORS,
        labels={"year": "Year", "adult_count": "Adult count", "species": "Species"},
        title="Annual adult passage by species",
    )
    fig.update_layout(barmode="stack", **_LAYOUT)
    fig.for_each_trace(lambda t: t.update(name=species_label(t.name)))
    return fig


def annual_project_figure(tidy: pd.DataFrame) -> go.Figure:
    """Yearly totals (all species) per project."""
    counts = counts_by_year_project(tidy)
    fig = px.line(
        counts,
        x="year",
        y="adult_count",
        color="project",
        markers=True,
        labels={"year": "Year", "adult_count": "Adult count", "project": "Project"},
        title="Annual adult passage by project",
    )
    fig.update_layout(**_LAYOUT)
    return fig


def weekly_timing_figure(tidy: pd.DataFrame) -> go.Figure:
    """Average weekly count per decade: how run timing has shifted.

    Each decade's weekly sum is divided by the number of years that decade
    has data for, so partial decades stay comparable.
    """
    counts = aggregate_counts(tidy, ("decade", "week"))
    years_per_decade = tidy.groupby("decade")["year"].nunique()
    counts["adult_count"] = counts["adult_count"] / counts["decade"].map(years_per_decade)
    counts["decade"] = counts["decade"].astype(str) + "s"
    fig = px.line(
        counts,
        x="week",
        y="adult_count",
        color="decade",
        labels={"week": "Week of year", "adult_count": "Mean adult count", "decade": "Decade"},
        title="Weekly run timing by decade",
    )
    fig.update_layout(**_LAYOUT)
    return fig


def decade_species_figure(tidy: pd.DataFrame) -> go.Figure:
    """Grouped bars of decade totals per species."""
    counts = counts_by_decade_species(tidy)
    counts["decade"] = counts["decade"].astype(str) + "s"
    fig = px.bar(
        counts,
        x="decade",
        y="adult_count",
        color="species",
        color_discrete_map=SPECIES_COLORS,
        barmode="group",
        labels={"decade": "Decade", "adult_count": "Adult count", "species": "Species"},
        title="Adult passage by decade and species",
    )
    fig.update_layout(**_LAYOUT)
    fig.for_each_trace(lambda t: t.update(name=species_label(t.name)))
    return fig


def report_figures(tidy: pd.DataFrame) -> dict[str, go.Figure]:
    """All static report figures keyed by section title, in page order."""
    return {
        "Species by year": annual_species_figure(tidy),
        "Projects by year": annual_project_figure(tidy),
        "Run timing": weekly_timing_figure(tidy),
        "Decades": decade_species_figure(tidy),
    }


def figure_html(fig: go.Figure, *, include_plotlyjs: bool | str = False) -> str:
    """HTML fragment (a ``<div>`` plus script) for embedding a figure in a page."""
    html: str = fig.to_html(full_html=False, include_plotlyjs=include_plotlyjs)
    return html
