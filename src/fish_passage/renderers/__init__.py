"""Pure rendering functions: tidy data -> Plotly figures and HTML strings.

All renderers follow the same pattern:
  - Input: tidy observations DataFrame (from analysis/) and options
  - Output: ``plotly.graph_objects.Figure`` or str (HTML)
  - No side effects, no I/O, no Prefect decorators

Used by flows/build.py (static report) and cli.py (explore command).

Public API:
  - charts: annual_species_figure, annual_project_figure,
    weekly_timing_figure, decade_species_figure, figure_html
  - report: build_report_html
  - explorer: render, build_explorer_html

Adding a chart
--------------
1. Write a figure function in ``renderers/charts.py`` that takes the tidy
   frame, aggregates it with ``analysis.aggregate`` and returns a Figure.
2. Add it to ``report_figures()`` with a section title.
3. Add tests: build the figure from a small tidy frame and assert on its
   traces.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
