"""HTML table extraction.

Turns an HTML document into a ``RawTable``.  ``colspan`` cells are expanded
so summary rows keep the header's width; a table that still isn't
rectangular raises ``TableParseError``.
"""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag

from fish_passage.datasources.dart.models import RawTable


class TableParseError(ValueError):
    """The table exists but its rows don't line up with the header."""


def _cell_text(cell: Tag) -> str:
    """Cell text with inner whitespace collapsed to single spaces."""
    return " ".join(cell.get_text(separator=" ", strip=True).split())


def _colspan(cell: Tag) -> int:
    try:
        return max(1, int(str(cell.get("colspan", 1))))
    except ValueError:
        return 1


def parse_table(html: str, *, index: int = 0) -> RawTable | None:
    """
    Parse the ``index``-th ``<table>`` of an HTML document.

    The first non-empty row becomes the header.

    Returns:
        The table, or None if the document has no such table or the table
        has no rows at all.

    Raises:
        TableParseError: If a data row's width differs from the header's.
    """
    soup = BeautifulSoup(html, "html.parser")
    tables = soup.find_all("table")
    if len(tables) <= index:
        return None

    grid: list[list[str]] = []
    for tr in tables[index].find_all("tr"):
        cells = tr.find_all(["th", "td"])
        if not cells:
            continue
        row: list[str] = []
        for cell in cells:
            row.append(_cell_text(cell))
            row.extend([""] * (_colspan(cell) - 1))
        grid.append(row)

    if not grid:
        return None

    header, *rows = grid
    for i, row in enumerate(rows, start=1):
        if len(row) != len(header):
            msg = f"row {i} has {len(row)} cells, header has {len(header)}"
            raise TableParseError(msg)

    return RawTable(header=tuple(header), rows=tuple(tuple(r) for r in rows))
