"""Interactive chart for a project/species selection.

``render`` is what a UI layer calls on every selection change: tidy data and
a ``FilterState`` in, one Plotly figure out.  It holds no state between
calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import plotly.express as px
import plotly.graph_objects as go

from fish_passage.analysis.aggregate import counts_by_year_week, selector_options
from fish_passage.renderers import render_template
from fish_passage.renderers.charts import figure_html, species_label

if TYPE_CHECKING:
    import pandas as pd

    from fish_passage.schemas import FilterState


def _title(filter_state: FilterState) -> str:
    species = species_label(filter_state.species) if filter_state.species else None
    return filter_state.model_copy(update={"species": species}).label


def render(tidy: pd.DataFrame, filter_state: FilterState) -> go.Figure:
    """Weekly counts for the selection, one line per year."""
    counts = counts_by_year_week(tidy, filter_state)
    title = f"Weekly adult passage: {_title(filter_state)}"

    if counts.empty:
        fig = go.Figure()
        fig.update_layout(
            title=title,
            template="plotly_white",
            annotations=[
                {
                    "text": "No observations for this selection",
                    "showarrow": False,
                    "xref": "paper",
                    "yref": "paper",
                    "x": 0.5,
                    "y": 0.5,
                }
            ],
        )
        return fig

    counts["year"] = counts["year"].astype(str)
    fig = px.line(
        counts,
        x="week",
        y="adult_count",
        color="year",
        markers=True,
        labels={"week": "Week of year", "adult_count": "Adult count", "year": "Year"},
        title=title,
    )
    fig.update_layout(template="plotly_white", height=480)
    return fig


def build_explorer_html(tidy: pd.DataFrame, filter_state: FilterState, *, updated: str = "") -> str:
    """Standalone page with the selection chart and the available choices."""
    fig = render(tidy, filter_state)
    return render_template(
        "explorer.html.j2",
        title=f"Explore: {_title(filter_state)}",
        updated=updated,
        figure=figure_html(fig, include_plotlyjs="cdn"),
        options=selector_options(tidy),
        selection=filter_state,
    )
