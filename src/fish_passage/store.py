"""Tiered data store with freshness-aware caching.

Manages read/write of data files organized into tiers by update frequency:
  - reference/: Slow-changing lookups (DART site catalog)
  - historical/: Fetched report data (consolidated checkpoint CSV, fetch report)
  - derived/: Computed outputs, always recomputed (HTML site)

JSON files are wrapped in a metadata envelope with ``valid_until`` so the
fetch flow can skip sources that are still fresh.

Tables (the consolidated checkpoint) are stored as CSV with a sidecar
``.meta.json`` via ``write_table()``. The CSV stays readable by any tool and
freshness metadata lives alongside it.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 (used at runtime, not just annotations)
from typing import Any

import pandas as pd


class DataStore:
    """Manages read/write of cached data files with TTL."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.reference = base_dir / "reference"
        self.historical = base_dir / "historical"
        self.derived = base_dir / "derived"

    def read(self, path: Path) -> Any:
        """Read data payload from a metadata-enveloped JSON file.

        Returns the ``data`` field, or None if the file doesn't exist.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``reference/dart/sites.json``).
            data: Payload to store under the ``data`` key.
            source: Data source identifier (e.g. ``"cbr.washington.edu"``).
            valid_until: Expiry timestamp. None means derived/no-cache.
            **params: Extra metadata fields (year range, query params, etc.).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        envelope = {"meta": self._meta(source, valid_until, params), "data": data}
        with full.open("w") as f:
            json.dump(envelope, f, indent=2)

        return full

    def write_table(
        self,
        path: Path,
        frame: pd.DataFrame,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Store a DataFrame as CSV with sidecar metadata.

        Args:
            path: Relative destination path (e.g. ``historical/dart/adult_daily.csv``).
            frame: Table to write; the index is not stored.
            source: Data source identifier.
            valid_until: Expiry timestamp.
            **params: Extra metadata fields.

        Returns:
            Absolute path of the stored CSV.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(full, index=False)

        meta = self._meta(source, valid_until, params)
        meta["rows"] = len(frame)
        meta["columns"] = [str(c) for c in frame.columns]

        with self._sidecar(full).open("w") as f:
            json.dump({"meta": meta}, f, indent=2)

        return full

    def read_table(self, path: Path) -> pd.DataFrame | None:
        """Read a stored CSV with every cell as a string.

        Blank cells stay empty strings; type coercion is the caller's job.
        Returns None if the file doesn't exist.
        """
        full = self._resolve(path)
        if not full.exists():
            return None
        return pd.read_csv(full, dtype=str, keep_default_na=False)

    def file_path(self, path: Path) -> Path | None:
        """Return the absolute path of a stored file, or None if missing."""
        full = self._resolve(path)
        return full if full.exists() else None

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    @staticmethod
    def _sidecar(full: Path) -> Path:
        return full.with_suffix(full.suffix + ".meta.json")

    @staticmethod
    def _meta(source: str, valid_until: datetime | None, params: dict[str, Any]) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()
        if params:
            meta.update(params)
        return meta

    def read_meta(self, path: Path) -> dict[str, Any]:
        """Read metadata from either a sidecar .meta.json or a JSON envelope."""
        full = self._resolve(path)
        sidecar = self._sidecar(full)
        if sidecar.exists():
            with sidecar.open() as f:
                result: dict[str, Any] = json.load(f)
            return result.get("meta", {})

        # Fall back to embedded metadata in JSON files
        if full.suffix == ".json" and full.exists():
            with full.open() as f:
                envelope: dict[str, Any] = json.load(f)
            return envelope.get("meta", {})

        return {}

    def is_fresh(self, path: Path) -> bool:
        """Check if a file exists and hasn't expired.

        Works with both JSON envelopes and sidecar .meta.json files.
        Returns False if the file is missing, has no ``valid_until``, or
        the expiry time has passed.
        """
        full = self._resolve(path)
        if not full.exists():
            return False

        valid_until = self.read_meta(path).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) < expiry
