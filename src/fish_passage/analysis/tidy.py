"""Reshape the consolidated DART table into tidy observations.

One output row = one (project, date, species) count.  Steps run in order;
each is a pure function over a DataFrame so they can be tested alone:

  promote_header → normalize_columns → drop_sentinel_rows → melt_species
  → parse_fields → add_calendar_fields → assign_run_labels

Species columns are an explicit list (``client.SPECIES_COLUMNS``).  Any
other non-identifier column is ignored with a warning, never melted.

``week`` counts 7-day blocks from January 1 (week 1 is Jan 1-7), so every
(year, week) pair holds days of a single calendar year.  Week 53 holds only
December 31, plus December 30 in leap years.

A ``run`` column in the report is kept as given; the season calendars only
label rows the report left blank.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import pandas as pd

from fish_passage.datasources.dart.client import (
    COLUMN_ALIASES,
    DATE_COLUMN,
    ID_COLUMNS,
    PROJECT_COLUMN,
    RUN_COLUMN,
    SENTINEL_LABELS,
    SPECIES_COLUMNS,
    TEMP_COLUMN,
)
from fish_passage.errors import TransformError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

logger = logging.getLogger(__name__)

TIDY_COLUMNS = [
    "project",
    "date",
    "species",
    "adult_count",
    "temp_c",
    "day",
    "month",
    "year",
    "week",
    "decade",
    "run",
]

# Season start (month, day, label) per species, in calendar order.  A date
# takes the label of the last season that has started.  Dates follow the
# Bonneville run definitions used in DART's adult reports.
RUN_CALENDARS: dict[str, tuple[tuple[int, int, str], ...]] = {
    "chinook": ((1, 1, "spring"), (6, 1, "summer"), (8, 1, "fall")),
    "jack_chinook": ((1, 1, "spring"), (6, 1, "summer"), (8, 1, "fall")),
    "steelhead": ((1, 1, "winter"), (4, 1, "summer"), (11, 1, "winter")),
    "wild_steelhead": ((1, 1, "winter"), (4, 1, "summer"), (11, 1, "winter")),
}

_NON_ALNUM = re.compile(r"[^0-9a-z]+")


def normalize_column_name(name: object) -> str:
    """Lowercase, underscore-separated column name with aliases applied.

    ``"Temp (C)"`` -> ``"temp_c"``, ``"Jack Chinook"`` -> ``"jack_chinook"``,
    ``"Stlhd"`` -> ``"steelhead"``.
    """
    text = _NON_ALNUM.sub("_", str(name).strip().lower()).strip("_")
    return COLUMN_ALIASES.get(text, text)


def promote_header(frame: pd.DataFrame) -> pd.DataFrame:
    """Use the first row as the header when the frame has positional labels."""
    if frame.empty or not all(isinstance(c, int) for c in frame.columns):
        return frame
    header = [str(v) for v in frame.iloc[0]]
    body = frame.iloc[1:].reset_index(drop=True)
    body.columns = header
    return body


def normalize_columns(frame: pd.DataFrame) -> pd.DataFrame:
    """Rename every column with ``normalize_column_name``."""
    return frame.rename(columns={c: normalize_column_name(c) for c in frame.columns})


def drop_sentinel_rows(frame: pd.DataFrame, column: str = DATE_COLUMN) -> pd.DataFrame:
    """Drop repeated header rows, totals, and blank-date rows."""
    if column not in frame.columns:
        msg = f"table has no {column!r} column (columns: {list(frame.columns)})"
        raise TransformError(msg)
    labels = frame[column].fillna("").astype(str).str.strip().str.lower()
    mask = labels.isin(SENTINEL_LABELS)
    if mask.any():
        logger.debug("Dropping %d sentinel rows", int(mask.sum()))
    return frame.loc[~mask].reset_index(drop=True)


def melt_species(
    frame: pd.DataFrame,
    species: Iterable[str] = SPECIES_COLUMNS,
) -> pd.DataFrame:
    """
    Reshape wide species columns into ``species`` / ``adult_count`` rows.

    Each input row becomes one row per recognized species column, in input
    row order.  Missing identifier columns (project, temperature) are added
    as nulls.

    Raises:
        TransformError: If none of the recognized species columns is present.
    """
    known = set(species)
    species_cols = [c for c in frame.columns if c in known]
    unknown = [c for c in frame.columns if c not in known and c not in ID_COLUMNS]
    if unknown:
        logger.warning("Ignoring unrecognized columns: %s", ", ".join(map(str, unknown)))
    if not species_cols:
        msg = f"no recognized species columns (columns: {list(frame.columns)})"
        raise TransformError(msg)

    wide = frame.copy()
    for col in ID_COLUMNS:
        if col not in wide.columns:
            wide[col] = pd.NA

    long = wide.melt(
        id_vars=list(ID_COLUMNS),
        value_vars=species_cols,
        var_name="species",
        value_name="adult_count",
        ignore_index=False,
    )
    return long.sort_index(kind="stable").reset_index(drop=True)


def _to_number(values: pd.Series) -> pd.Series:
    """Permissive numeric parse: thousands separators stripped, junk -> NaN."""
    text = values.astype(object).where(values.notna(), "").astype(str)
    cleaned = text.str.replace(",", "", regex=False).str.strip()
    return pd.to_numeric(cleaned, errors="coerce").astype("float64")


def parse_fields(long: pd.DataFrame) -> pd.DataFrame:
    """Parse dates and numbers.  Unparseable dates drop the row; bad numbers become NaN."""
    out = long.copy()
    out[DATE_COLUMN] = pd.to_datetime(out[DATE_COLUMN], errors="coerce", format="mixed")
    bad_dates = out[DATE_COLUMN].isna()
    if bad_dates.any():
        logger.warning("Dropping %d rows with unparseable dates", int(bad_dates.sum()))
        out = out.loc[~bad_dates]

    out["adult_count"] = _to_number(out["adult_count"])
    out[TEMP_COLUMN] = _to_number(out[TEMP_COLUMN])

    project = out[PROJECT_COLUMN].astype(object)
    out[PROJECT_COLUMN] = project.where(project.notna() & (project.astype(str).str.strip() != ""))

    run = out[RUN_COLUMN].astype(object)
    labels = run.astype(str).str.strip().str.lower()
    out[RUN_COLUMN] = labels.where(run.notna() & (labels != ""))
    return out.reset_index(drop=True)


def add_calendar_fields(long: pd.DataFrame) -> pd.DataFrame:
    """Add day, month, year, week of year, and decade from the parsed date."""
    out = long.copy()
    dates = out[DATE_COLUMN].dt
    out["day"] = dates.day.astype(int)
    out["month"] = dates.month.astype(int)
    out["year"] = dates.year.astype(int)
    out["week"] = (dates.dayofyear.astype(int) - 1) // 7 + 1
    out["decade"] = (out["year"] // 10) * 10
    return out


def assign_run_labels(
    long: pd.DataFrame,
    calendars: Mapping[str, tuple[tuple[int, int, str], ...]] = RUN_CALENDARS,
) -> pd.DataFrame:
    """Label each row with its run (spring/summer/fall/winter) where the species has one.

    Labels already in the ``run`` column win; the calendar fills the gaps.
    """
    out = long.copy()
    if RUN_COLUMN in out.columns:
        run = out[RUN_COLUMN].astype(object)
    else:
        run = pd.Series(pd.NA, index=out.index, dtype=object)
    unlabeled = run.isna()
    month_day = out["month"] * 100 + out["day"]
    for species, seasons in calendars.items():
        rows = out["species"] == species
        for month, day, label in seasons:
            run[unlabeled & rows & (month_day >= month * 100 + day)] = label
    out[RUN_COLUMN] = run
    return out


def tidy_observations(
    frame: pd.DataFrame,
    *,
    species: Iterable[str] = SPECIES_COLUMNS,
    project_names: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """
    Turn the consolidated raw table into tidy observations.

    Args:
        frame: Consolidated table as loaded from the checkpoint (all strings).
        species: Normalized species column names to melt.
        project_names: Optional code -> display name map applied to ``project``.

    Returns:
        DataFrame with ``TIDY_COLUMNS``.

    Raises:
        TransformError: If no species column is recognized or no rows
            survive filtering.
    """
    wide = normalize_columns(promote_header(frame))
    wide = drop_sentinel_rows(wide)
    if wide.empty:
        msg = "no data rows left after dropping header and total rows"
        raise TransformError(msg)

    long = parse_fields(melt_species(wide, species))
    if long.empty:
        msg = "no rows with a parseable date"
        raise TransformError(msg)

    if project_names:
        long[PROJECT_COLUMN] = long[PROJECT_COLUMN].replace(dict(project_names))

    tidy = assign_run_labels(add_calendar_fields(long))
    logger.info(
        "Tidied %d observations across %d species and %d projects",
        len(tidy),
        tidy["species"].nunique(),
        tidy[PROJECT_COLUMN].nunique(),
    )
    return tidy[TIDY_COLUMNS]
