"""Fold fetch outcomes into one consolidated table.

The first present table's header is the schema.  Later tables must match
it exactly (same columns, same order); anything else is reported as a
``SchemaMismatch`` and left out rather than coerced.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pandas as pd

from fish_passage.datasources.dart.models import Absent
from fish_passage.errors import ConsolidationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fish_passage.datasources.dart.models import FetchOutcome
    from fish_passage.schemas import QueryTarget

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchemaMismatch:
    """A present table whose header doesn't match the established schema."""

    target: QueryTarget
    expected: tuple[str, ...]
    found: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.target.year,
            "site": self.target.site,
            "url": self.target.url,
            "expected": list(self.expected),
            "found": list(self.found),
        }


@dataclass
class ConsolidatedRecord:
    """Row-union of all compatible fetched tables."""

    frame: pd.DataFrame
    tables: int
    absent: list[Absent] = field(default_factory=list)
    mismatches: list[SchemaMismatch] = field(default_factory=list)

    @property
    def rows(self) -> int:
        return len(self.frame)


def consolidate(outcomes: Sequence[FetchOutcome]) -> ConsolidatedRecord:
    """
    Concatenate present tables in fetch order.

    Raises:
        ConsolidationError: If no outcome carries a table.
    """
    schema: tuple[str, ...] | None = None
    rows: list[tuple[str, ...]] = []
    tables = 0
    absent: list[Absent] = []
    mismatches: list[SchemaMismatch] = []

    for outcome in outcomes:
        if isinstance(outcome, Absent):
            absent.append(outcome)
            continue
        header = outcome.table.header
        if schema is None:
            schema = header
        elif header != schema:
            logger.warning(
                "Schema mismatch at %s: expected %d columns %s, found %d columns %s",
                outcome.target.url,
                len(schema),
                list(schema),
                len(header),
                list(header),
            )
            mismatches.append(SchemaMismatch(outcome.target, schema, header))
            continue
        rows.extend(outcome.table.rows)
        tables += 1

    if schema is None:
        msg = f"no tables found across {len(outcomes)} query targets"
        raise ConsolidationError(msg)

    frame = pd.DataFrame(rows, columns=list(schema), dtype=str)
    logger.info(
        "Consolidated %d tables into %d rows (%d absent, %d mismatched)",
        tables,
        len(frame),
        len(absent),
        len(mismatches),
    )
    return ConsolidatedRecord(frame=frame, tables=tables, absent=absent, mismatches=mismatches)
