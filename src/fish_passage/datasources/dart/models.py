"""DART fetch result models.

A fetch either yields a complete table (``Present``) or an explicit
``Absent`` with a reason.  Missing data is the common case for a dense
year x project grid, so it is a value, not an exception.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fish_passage.schemas import QueryTarget


class AbsentReason(StrEnum):
    """Why a query target produced no table."""

    NO_TABLE = "no_table"
    REQUEST_FAILED = "request_failed"
    MALFORMED_TABLE = "malformed_table"


@dataclass(frozen=True)
class RawTable:
    """A rectangular table of string cells: one header row plus data rows."""

    header: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...] = ()

    @property
    def width(self) -> int:
        return len(self.header)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class Present:
    """A query target whose page contained a table."""

    target: QueryTarget
    table: RawTable

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Absent:
    """A query target that produced no table."""

    target: QueryTarget
    reason: AbsentReason
    detail: str = ""

    @property
    def ok(self) -> bool:
        return False


FetchOutcome = Present | Absent
