"""
Domain models for fish passage.

Pydantic models shared across datasources, analysis and renderers.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


class Site(BaseModel):
    """A dam or monitoring location listed in the DART catalog."""

    model_config = {"frozen": True, "str_strip_whitespace": True}

    code: str = Field(..., min_length=1, description="Short project code, e.g. BON")
    name: str = Field(..., description="Display name, e.g. Bonneville")


class QueryTarget(BaseModel):
    """One (year, site) combination and the URL that fetches it."""

    model_config = {"frozen": True}

    year: int
    site: str
    url: str


class FilterState(BaseModel):
    """Selections coming from a UI layer.  ``None`` means no filter."""

    project: str | None = None
    species: str | None = None
    year_min: int | None = None
    year_max: int | None = None

    @model_validator(mode="after")
    def _check_year_order(self) -> FilterState:
        lo, hi = self.year_min, self.year_max
        if lo is not None and hi is not None and lo > hi:
            msg = f"year_min ({self.year_min}) is after year_max ({self.year_max})"
            raise ValueError(msg)
        return self

    @property
    def label(self) -> str:
        """Short human-readable description, used in chart titles."""
        parts = [self.project or "All projects", self.species or "all species"]
        if self.year_min is not None or self.year_max is not None:
            lo = self.year_min if self.year_min is not None else "…"
            hi = self.year_max if self.year_max is not None else "…"
            parts.append(f"{lo}–{hi}")
        return ", ".join(parts)
