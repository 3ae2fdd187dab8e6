"""
Tests for the fetch flow module.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pandas as pd
import pytest
import requests

from fish_passage.analysis.consolidate import consolidate
from fish_passage.datasources.dart.models import Absent, AbsentReason, Present, RawTable
from fish_passage.errors import ConsolidationError
from fish_passage.flows import fetch
from fish_passage.schemas import QueryTarget, Site
from fish_passage.store import DataStore

if TYPE_CHECKING:
    from pathlib import Path

REPORT_HTML = """
<html><body>
<table>
  <tr><th>Project</th><th>Date</th><th>Chinook</th><th>Steelhead</th></tr>
  <tr><td>BON</td><td>2019-07-04</td><td>10</td><td>3</td></tr>
  <tr><td>BON</td><td>2019-07-05</td><td>12</td><td>4</td></tr>
  <tr><td>BON</td><td>Total</td><td>22</td><td>7</td></tr>
</table>
</body></html>
"""

NO_DATA_HTML = "<html><body><p>No data found.</p></body></html>"

SITES = [Site(code="BON", name="Bonneville"), Site(code="TDA", name="The Dalles")]


def make_response(text: str) -> requests.Response:
    resp = requests.Response()
    resp.status_code = 200
    resp._content = text.encode()
    resp.encoding = "utf-8"
    return resp


def dart_session(pages: dict[str, str]) -> Mock:
    """Session answering each report URL by the ``proj=`` code it contains."""

    def get(url: str) -> requests.Response:
        for code, html in pages.items():
            if f"proj={code}&" in url:
                return make_response(html)
        return make_response(NO_DATA_HTML)

    session = Mock()
    session.get.side_effect = get
    return session


def target(site: str, year: int = 2019) -> QueryTarget:
    return QueryTarget(year=year, site=site, url=f"https://example.org/rpt?year={year}&proj={site}")


class TestSaveCatalog:
    """Test caching the site catalog."""

    def test_writes_sites(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)

        fetch.save_catalog(SITES)

        saved = json.loads((tmp_path / "reference" / "dart" / "sites.json").read_text())
        assert saved["data"] == [
            {"code": "BON", "name": "Bonneville"},
            {"code": "TDA", "name": "The Dalles"},
        ]
        assert ds.is_fresh(fetch.SITES_PATH)


class TestBuildFetchReport:
    """Test the fetch report contents."""

    def test_report(self) -> None:
        table = RawTable(header=("Date", "Chinook"), rows=(("2019-07-04", "1"),))
        outcomes = [
            Present(target("BON"), table),
            Absent(target("TDA"), AbsentReason.NO_TABLE, "no <table> element"),
            Absent(target("MCN"), AbsentReason.REQUEST_FAILED, "read timed out"),
            Present(target("JDA"), RawTable(header=("Date",), rows=(("2019-07-04",),))),
        ]
        record = consolidate(outcomes)

        report = fetch.build_fetch_report(outcomes, record)

        assert report["targets"] == 4
        assert report["counts"] == {"present": 2, "no_table": 1, "request_failed": 1}
        assert report["tables"] == 1
        assert report["rows"] == 1
        assert report["failures"] == [
            {
                "year": 2019,
                "site": "MCN",
                "url": "https://example.org/rpt?year=2019&proj=MCN",
                "reason": "request_failed",
                "detail": "read timed out",
            }
        ]
        assert [m["site"] for m in report["schema_mismatches"]] == ["JDA"]


class TestSaveCheckpoint:
    """Test writing the checkpoint CSV."""

    def test_writes_csv_with_metadata(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)
        table = RawTable(header=("Date", "Chinook"), rows=(("2019-07-04", "1,204"),))
        record = consolidate([Present(target("BON"), table)])

        path = fetch.save_checkpoint(record, 30, 2019, 2019)

        assert path == tmp_path / "historical" / "dart" / "adult_daily.csv"
        frame = ds.read_table(fetch.CHECKPOINT_PATH)
        assert frame is not None
        assert frame.to_dict("records") == [{"Date": "2019-07-04", "Chinook": "1,204"}]
        meta = ds.read_meta(fetch.CHECKPOINT_PATH)
        assert meta["rows"] == 1
        assert meta["tables"] == 1
        assert meta["year_min"] == 2019
        assert ds.is_fresh(fetch.CHECKPOINT_PATH)


class TestFetchAllFlow:
    """Test the main fetch flow."""

    @patch("fish_passage.flows.fetch.http.create_session")
    @patch("fish_passage.flows.fetch.dart.load_sites")
    def test_fetch_all(
        self,
        mock_load_sites: Mock,
        mock_create_session: Mock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Catalog, fetch, consolidate and checkpoint in one run."""
        monkeypatch.setattr(fetch, "store", DataStore(tmp_path))
        mock_load_sites.return_value = SITES
        mock_create_session.return_value = dart_session({"BON": REPORT_HTML})

        result = fetch.fetch_all(year_min=2018, year_max=2019)

        assert result["skipped"] is False
        assert result["sites"] == 2
        assert result["targets"] == 4
        # BON answers for both years; TDA never has a table
        assert result["tables"] == 2
        assert result["rows"] == 6
        assert result["mismatches"] == 0

        assert (tmp_path / "reference" / "dart" / "sites.json").exists()
        assert (tmp_path / "historical" / "dart" / "adult_daily.csv").exists()
        report = json.loads((tmp_path / "historical" / "dart" / "fetch_report.json").read_text())
        assert report["data"]["counts"] == {"present": 2, "no_table": 2}
        assert report["data"]["failures"] == []

    @patch("fish_passage.flows.fetch.dart.load_sites")
    def test_fresh_checkpoint_skips_fetch(
        self, mock_load_sites: Mock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)
        ds.write_table(
            fetch.CHECKPOINT_PATH,
            pd.DataFrame({"Date": ["2019-07-04"], "Chinook": ["1"]}),
            source="test",
            valid_until=datetime.now(UTC) + timedelta(days=1),
            year_min=2019,
            year_max=2019,
        )

        result = fetch.fetch_all(year_min=2019, year_max=2019)

        assert result["skipped"] is True
        assert result["rows"] == 1
        mock_load_sites.assert_not_called()

    @patch("fish_passage.flows.fetch.http.create_session")
    @patch("fish_passage.flows.fetch.dart.load_sites")
    def test_fresh_checkpoint_for_other_years_refetches(
        self,
        mock_load_sites: Mock,
        mock_create_session: Mock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)
        ds.write_table(
            fetch.CHECKPOINT_PATH,
            pd.DataFrame({"Date": ["2019-07-04"], "Chinook": ["1"]}),
            source="test",
            valid_until=datetime.now(UTC) + timedelta(days=1),
            year_min=2019,
            year_max=2019,
        )
        mock_load_sites.return_value = SITES[:1]
        mock_create_session.return_value = dart_session({"BON": REPORT_HTML})

        result = fetch.fetch_all(year_min=2018, year_max=2019)

        assert result["skipped"] is False
        assert result["targets"] == 2
        meta = ds.read_meta(fetch.CHECKPOINT_PATH)
        assert (meta["year_min"], meta["year_max"]) == (2018, 2019)

    @patch("fish_passage.flows.fetch.http.create_session")
    @patch("fish_passage.flows.fetch.dart.load_sites")
    def test_force_refetches(
        self,
        mock_load_sites: Mock,
        mock_create_session: Mock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)
        ds.write_table(
            fetch.CHECKPOINT_PATH,
            pd.DataFrame({"Date": ["2019-07-04"], "Chinook": ["1"]}),
            source="test",
            valid_until=datetime.now(UTC) + timedelta(days=1),
        )
        mock_load_sites.return_value = SITES[:1]
        mock_create_session.return_value = dart_session({"BON": REPORT_HTML})

        result = fetch.fetch_all(year_min=2019, year_max=2019, force=True)

        assert result["skipped"] is False
        assert result["rows"] == 3

    @patch("fish_passage.flows.fetch.http.create_session")
    @patch("fish_passage.flows.fetch.dart.load_sites")
    def test_no_tables_fails(
        self,
        mock_load_sites: Mock,
        mock_create_session: Mock,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setattr(fetch, "store", DataStore(tmp_path))
        mock_load_sites.return_value = SITES
        mock_create_session.return_value = dart_session({})

        with pytest.raises(ConsolidationError):
            fetch.fetch_all(year_min=2019, year_max=2019)

        assert not (tmp_path / "historical" / "dart" / "adult_daily.csv").exists()
