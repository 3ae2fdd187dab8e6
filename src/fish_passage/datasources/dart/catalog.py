"""Site catalog: the list of DART projects to query."""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING

import requests

from fish_passage.datasources.dart.client import CATALOG_URL
from fish_passage.datasources.dart.tables import TableParseError, parse_table
from fish_passage.errors import CatalogError
from fish_passage.schemas import Site
from fish_passage.services import http

if TYPE_CHECKING:
    from fish_passage.datasources.dart.models import RawTable

logger = logging.getLogger(__name__)


def parse_sites(table: RawTable, *, code_column: int = 0, name_column: int = 1) -> list[Site]:
    """
    Build sites from a catalog table, in table order.

    Rows with a blank code are skipped.  When the table has no name column
    the code doubles as the name.  Duplicate codes are logged, not removed.
    """
    sites: list[Site] = []
    for row in table.rows:
        code = row[code_column].strip() if code_column < len(row) else ""
        if not code:
            continue
        name = row[name_column].strip() if name_column < len(row) else ""
        sites.append(Site(code=code, name=name or code))

    duplicates = sorted(code for code, n in Counter(s.code for s in sites).items() if n > 1)
    if duplicates:
        logger.warning("Catalog lists duplicate site codes: %s", ", ".join(duplicates))
    return sites


def load_sites(
    url: str = CATALOG_URL,
    *,
    session: requests.Session | None = None,
    code_column: int = 0,
    name_column: int = 1,
) -> list[Site]:
    """
    Fetch the catalog page and return its sites.

    Retries come from the session's retry adapter.

    Raises:
        CatalogError: If the page can't be fetched, has no usable table,
            or lists no sites.  Nothing downstream can run without sites.
    """
    sess = session or http.session
    try:
        resp = sess.get(url)
        resp.raise_for_status()
    except requests.RequestException as exc:
        msg = f"catalog page unreachable: {exc}"
        raise CatalogError(msg, url) from exc

    try:
        table = parse_table(resp.text)
    except TableParseError as exc:
        msg = f"catalog table is malformed: {exc}"
        raise CatalogError(msg, url) from exc
    if table is None:
        msg = "catalog page contains no table"
        raise CatalogError(msg, url)

    sites = parse_sites(table, code_column=code_column, name_column=name_column)
    if not sites:
        msg = "catalog table lists no sites"
        raise CatalogError(msg, url)

    logger.info("Loaded %d sites from %s", len(sites), url)
    return sites
