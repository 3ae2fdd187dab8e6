"""Static report page: summary numbers plus every report chart."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fish_passage.renderers import render_template
from fish_passage.renderers.charts import figure_html, report_figures, species_label

if TYPE_CHECKING:
    import pandas as pd


def summarize(tidy: pd.DataFrame) -> dict[str, Any]:
    """Headline numbers for the top of the report."""
    totals = tidy.groupby("species")["adult_count"].sum().sort_values(ascending=False)
    return {
        "observations": len(tidy),
        "projects": int(tidy["project"].nunique()),
        "species": int(tidy["species"].nunique()),
        "year_min": int(tidy["year"].min()),
        "year_max": int(tidy["year"].max()),
        "top_species": [
            {"name": species_label(str(name)), "count": f"{count:,.0f}"}
            for name, count in totals.head(5).items()
        ],
    }


def build_report_html(tidy: pd.DataFrame, *, updated: str, source: str = "") -> str:
    """Render the full report page.

    Args:
        tidy: Tidy observations.
        updated: Timestamp label shown in the header.
        source: Where the data came from (shown in the footer).
    """
    sections = []
    for i, (title, fig) in enumerate(report_figures(tidy).items()):
        # Only the first figure pulls in plotly.js
        sections.append(
            {"title": title, "html": figure_html(fig, include_plotlyjs="cdn" if i == 0 else False)}
        )
    return render_template(
        "report.html.j2",
        title="Adult fish passage",
        updated=updated,
        source=source,
        summary=summarize(tidy),
        sections=sections,
    )
