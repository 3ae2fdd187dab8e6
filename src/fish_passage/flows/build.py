"""
Prefect flow for building the static report site from the checkpoint.

Reloads the consolidated CSV (never the in-memory fetch result), tidies it,
and renders the Plotly report into ``data/derived/site/index.html``.

Run locally:
    python -m fish_passage.flows.build
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any
from zoneinfo import ZoneInfo

import pandas as pd
from prefect import flow, task

from fish_passage.analysis.tidy import tidy_observations
from fish_passage.config import get_settings
from fish_passage.errors import TransformError
from fish_passage.renderers.explorer import build_explorer_html
from fish_passage.renderers.report import build_report_html
from fish_passage.store import DataStore

if TYPE_CHECKING:
    from fish_passage.schemas import FilterState

# Store and output paths
store = DataStore(get_settings().data_dir)
SITE_DIR = store.derived / "site"

# Paths matching what fetch.py writes
SITES_PATH = Path("reference/dart/sites.json")
CHECKPOINT_PATH = Path("historical/dart/adult_daily.csv")

SOURCE = "cbr.washington.edu (DART)"


# =============================================================================
# Loading
# =============================================================================


def read_checkpoint() -> pd.DataFrame:
    """Load the consolidated checkpoint table.

    Raises:
        TransformError: If the checkpoint is missing or unreadable.
    """
    location = str(store.base / CHECKPOINT_PATH)
    try:
        frame = store.read_table(CHECKPOINT_PATH)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        msg = f"checkpoint is unreadable: {exc}"
        raise TransformError(msg, location) from exc
    if frame is None:
        msg = "checkpoint not found; run the fetch flow first"
        raise TransformError(msg, location)
    return frame


def read_project_names() -> dict[str, str]:
    """Site code -> display name from the cached catalog (empty if absent)."""
    sites = store.read(SITES_PATH) or []
    return {s["code"]: s["name"] for s in sites if s.get("code") and s.get("name")}


def load_tidy() -> pd.DataFrame:
    """Checkpoint -> tidy observations, with project codes mapped to names.

    Raises:
        TransformError: Tagged with the checkpoint path.
    """
    frame = read_checkpoint()
    try:
        return tidy_observations(frame, project_names=read_project_names())
    except TransformError as exc:
        raise TransformError(exc.message, str(store.base / CHECKPOINT_PATH)) from exc


def updated_label() -> str:
    """Checkpoint fetch time in Pacific time, or empty if unknown."""
    fetched_at = store.read_meta(CHECKPOINT_PATH).get("fetched_at")
    if not fetched_at:
        return ""
    fetched_dt = datetime.fromisoformat(fetched_at)
    return fetched_dt.astimezone(ZoneInfo("America/Los_Angeles")).strftime("%Y-%m-%d %H:%M")


@task(name="load-observations")
def load_observations() -> pd.DataFrame:
    """Load the checkpoint and tidy it."""
    return load_tidy()


# =============================================================================
# Rendering and output
# =============================================================================


@task(name="build-html")
def build_html(tidy: pd.DataFrame, updated: str) -> str:
    """Build the report page from tidy observations."""
    return build_report_html(tidy, updated=updated, source=SOURCE)


@task(name="write-site")
def write_site(html: str, name: str = "index.html") -> Path:
    """Write HTML to site directory."""
    SITE_DIR.mkdir(parents=True, exist_ok=True)
    output_path = SITE_DIR / name
    with output_path.open("w") as f:
        f.write(html)
    return output_path


def write_explorer(filter_state: FilterState, tidy: pd.DataFrame | None = None) -> Path:
    """Render one selection to ``explore.html`` in the site directory.

    Plain function (no Prefect) so the CLI can call it on every selection.
    """
    tidy = load_tidy() if tidy is None else tidy
    html = build_explorer_html(tidy, filter_state, updated=updated_label())
    SITE_DIR.mkdir(parents=True, exist_ok=True)
    output_path = SITE_DIR / "explore.html"
    output_path.write_text(html)
    return output_path


@flow(name="build-site", log_prints=True)
def build_all() -> dict[str, Any]:
    """
    Build static report site from the checkpoint.

    This is the main Prefect flow that generates the static site.
    """
    print("Loading observations from checkpoint...")
    tidy = load_observations()
    print(f"Tidied {len(tidy)} observations.")

    print("Building HTML...")
    html = build_html(tidy, updated_label())

    print("Writing site...")
    output_path = write_site(html)

    print(f"Site built: {output_path}")
    return {"pages": 1, "observations": len(tidy), "output": str(output_path)}


if __name__ == "__main__":
    result = build_all()
    print(f"Flow complete: {result}")
