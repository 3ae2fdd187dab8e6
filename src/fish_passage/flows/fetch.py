"""
Prefect flow for fetching DART adult passage reports.

Loads the site catalog, builds one query per (year, site), fetches every
report table and writes the consolidated checkpoint CSV.  While the
checkpoint is fresh the flow skips fetching entirely.

Run locally:
    python -m fish_passage.flows.fetch

Run with Prefect dashboard:
    prefect server start &
    python -m fish_passage.flows.fetch
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from prefect import flow, task

from fish_passage.analysis.consolidate import ConsolidatedRecord, consolidate
from fish_passage.config import get_settings
from fish_passage.datasources import dart
from fish_passage.datasources.dart.models import AbsentReason
from fish_passage.services import http
from fish_passage.store import DataStore

if TYPE_CHECKING:
    from fish_passage.datasources.dart.models import FetchOutcome
    from fish_passage.schemas import QueryTarget, Site

# Data store with tiered directories
store = DataStore(get_settings().data_dir)

# Relative paths within the store
SITES_PATH = Path("reference/dart/sites.json")
CHECKPOINT_PATH = Path("historical/dart/adult_daily.csv")
REPORT_PATH = Path("historical/dart/fetch_report.json")

SOURCE = "cbr.washington.edu (DART)"


@task(name="load-catalog", retries=1, retry_delay_seconds=10)
def load_catalog(catalog_url: str) -> list[Site]:
    """Fetch the DART site catalog."""
    return dart.load_sites(catalog_url)


@task(name="save-catalog")
def save_catalog(sites: list[Site]) -> Path:
    """Save the site catalog via store (used later to label projects)."""
    return store.write(
        SITES_PATH,
        [s.model_dump() for s in sites],
        source=SOURCE,
        valid_until=datetime.now(UTC) + timedelta(days=90),
    )


@task(name="build-query-targets")
def build_targets(
    sites: list[Site], year_min: int, year_max: int, template: str
) -> list[QueryTarget]:
    """Dense year x site grid of report URLs."""
    return dart.build_query_targets(sites, year_min, year_max, template=template)


@task(name="fetch-tables")
def fetch_tables(targets: list[QueryTarget], workers: int = 1) -> list[FetchOutcome]:
    """Fetch every report; missing tables come back as ``Absent`` outcomes."""
    settings = get_settings()
    session = http.create_session(
        retry=http.build_retry(settings.http_retries, settings.http_backoff),
        timeout=settings.request_timeout,
        pool_size=max(workers, 1),
    )
    return dart.fetch_targets(targets, session=session, workers=workers)


@task(name="consolidate-tables")
def consolidate_tables(outcomes: list[FetchOutcome]) -> ConsolidatedRecord:
    """Union of all compatible tables; fails if there are none."""
    return consolidate(outcomes)


def build_fetch_report(outcomes: list[FetchOutcome], record: ConsolidatedRecord) -> dict[str, Any]:
    """Outcome counts, failed targets, and schema mismatches for the fetch report."""
    failures = [
        {
            "year": a.target.year,
            "site": a.target.site,
            "url": a.target.url,
            "reason": str(a.reason),
            "detail": a.detail,
        }
        for a in record.absent
        if a.reason != AbsentReason.NO_TABLE
    ]
    return {
        "targets": len(outcomes),
        "counts": dart.summarize_outcomes(outcomes),
        "tables": record.tables,
        "rows": record.rows,
        "failures": failures,
        "schema_mismatches": [m.to_dict() for m in record.mismatches],
    }


@task(name="save-fetch-report")
def save_fetch_report(report: dict[str, Any]) -> Path:
    """Save the fetch report via store."""
    return store.write(REPORT_PATH, report, source=SOURCE)


@task(name="save-checkpoint")
def save_checkpoint(
    record: ConsolidatedRecord, ttl_days: int, year_min: int, year_max: int
) -> Path:
    """Write the consolidated table as the checkpoint CSV."""
    return store.write_table(
        CHECKPOINT_PATH,
        record.frame,
        source=SOURCE,
        valid_until=datetime.now(UTC) + timedelta(days=ttl_days),
        tables=record.tables,
        year_min=year_min,
        year_max=year_max,
    )


@flow(name="fetch-data", log_prints=True)
def fetch_all(
    year_min: int | None = None,
    year_max: int | None = None,
    force: bool = False,
) -> dict[str, Any]:
    """
    Fetch DART reports and write the consolidated checkpoint.

    This is the main Prefect flow for ingestion.  Skips the network when
    the checkpoint is still fresh and covers the same year range, unless
    ``force`` is set.
    """
    settings = get_settings()
    year_min = settings.year_min if year_min is None else year_min
    year_max = settings.year_max if year_max is None else year_max

    if not force and store.is_fresh(CHECKPOINT_PATH):
        meta = store.read_meta(CHECKPOINT_PATH)
        cached = (meta.get("year_min"), meta.get("year_max"))
        if cached == (year_min, year_max):
            print(f"Checkpoint is fresh (fetched {meta.get('fetched_at', '?')}), skipping fetch.")
            return {
                "skipped": True,
                "rows": meta.get("rows", 0),
                "output": str(store.file_path(CHECKPOINT_PATH)),
            }
        print(
            f"Checkpoint covers {cached[0]}-{cached[1]}, not {year_min}-{year_max}; fetching again."
        )

    print(f"Loading site catalog from {settings.catalog_url}...")
    sites = load_catalog(settings.catalog_url)
    save_catalog(sites)
    print(f"Found {len(sites)} sites.")

    targets = build_targets(sites, year_min, year_max, settings.query_template)
    print(
        f"Fetching {len(targets)} reports ({year_min}-{year_max}, {len(sites)} sites, "
        f"{settings.fetch_workers} worker(s))..."
    )
    outcomes = fetch_tables(targets, settings.fetch_workers)
    counts = dart.summarize_outcomes(outcomes)
    print(f"Fetch outcomes: {counts}")

    record = consolidate_tables(outcomes)
    report_path = save_fetch_report(build_fetch_report(outcomes, record))
    if record.mismatches:
        print(f"Warning: {len(record.mismatches)} tables had a different schema; see {report_path}")

    output_path = save_checkpoint(record, settings.checkpoint_ttl_days, year_min, year_max)
    print(f"Saved {record.rows} rows from {record.tables} tables to {output_path}")

    return {
        "skipped": False,
        "sites": len(sites),
        "targets": len(targets),
        "tables": record.tables,
        "rows": record.rows,
        "mismatches": len(record.mismatches),
        "output": str(output_path),
    }


if __name__ == "__main__":
    result = fetch_all()
    print(f"Flow complete: {result}")
