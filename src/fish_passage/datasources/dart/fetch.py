"""Batch fetching of DART report tables.

Every query target is fetched on its own and ends up as either ``Present``
or ``Absent``.  Per-URL problems never escape ``fetch_targets``; only the
caller decides whether an all-absent batch is fatal.
"""

from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

import requests

from fish_passage.datasources.dart.models import Absent, AbsentReason, FetchOutcome, Present
from fish_passage.datasources.dart.tables import TableParseError, parse_table
from fish_passage.services import http

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from fish_passage.schemas import QueryTarget

logger = logging.getLogger(__name__)

PROGRESS_EVERY = 250


def fetch_target(target: QueryTarget, *, session: requests.Session | None = None) -> FetchOutcome:
    """Fetch one query target and parse its table."""
    sess = session or http.session
    try:
        resp = sess.get(target.url)
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.debug("Request failed for %s %s: %s", target.site, target.year, exc)
        return Absent(target, AbsentReason.REQUEST_FAILED, str(exc))

    try:
        table = parse_table(resp.text or "")
    except TableParseError as exc:
        logger.debug("Malformed table at %s: %s", target.url, exc)
        return Absent(target, AbsentReason.MALFORMED_TABLE, str(exc))

    if table is None:
        return Absent(target, AbsentReason.NO_TABLE, "no <table> element")
    if not table.rows:
        return Absent(target, AbsentReason.NO_TABLE, "table has no data rows")
    return Present(target, table)


def fetch_targets(
    targets: Sequence[QueryTarget],
    *,
    session: requests.Session | None = None,
    workers: int = 1,
) -> list[FetchOutcome]:
    """
    Fetch every target, returning one outcome per target in input order.

    Args:
        targets: Query targets, usually from ``build_query_targets``.
        session: HTTP session (defaults to the shared retrying session).
        workers: Threads to fetch with.  Results are collected with
            ``Executor.map`` so order matches a sequential run.
    """
    sess = session or http.session
    total = len(targets)

    def _one(target: QueryTarget) -> FetchOutcome:
        return fetch_target(target, session=sess)

    if workers <= 1:
        outcomes = _collect(map(_one, targets), total)
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            outcomes = _collect(executor.map(_one, targets), total)

    counts = summarize_outcomes(outcomes)
    logger.info(
        "Fetched %d targets: %d present, %d absent",
        total,
        counts.get("present", 0),
        total - counts.get("present", 0),
    )
    return outcomes


def _collect(results: Iterable[FetchOutcome], total: int) -> list[FetchOutcome]:
    outcomes: list[FetchOutcome] = []
    for i, outcome in enumerate(results, start=1):
        outcomes.append(outcome)
        if i % PROGRESS_EVERY == 0:
            logger.info("Fetched %d/%d targets", i, total)
    return outcomes


def summarize_outcomes(outcomes: Sequence[FetchOutcome]) -> dict[str, int]:
    """Count outcomes: ``present`` plus one key per absent reason."""
    counts: Counter[str] = Counter()
    for outcome in outcomes:
        if isinstance(outcome, Present):
            counts["present"] += 1
        else:
            counts[str(outcome.reason)] += 1
    return dict(counts)
