"""Fatal pipeline errors.

Each error names the stage that failed and, where one applies, the URL,
site code, or file path involved.  Per-URL fetch problems are not errors;
they are ``Absent`` outcomes (see ``datasources/dart/models.py``).
"""

from __future__ import annotations


class PipelineError(Exception):
    """A failure that stops the pipeline."""

    stage = "pipeline"

    def __init__(self, message: str, identifier: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.identifier = identifier

    def __reduce__(self) -> tuple[type[PipelineError], tuple[str, str | None]]:
        # Keep the identifier when Prefect pickles a failed task's exception
        return (type(self), (self.message, self.identifier))

    def __str__(self) -> str:
        text = f"[{self.stage}] {self.message}"
        if self.identifier:
            text += f" ({self.identifier})"
        return text


class CatalogError(PipelineError):
    """Site catalog page unreachable, tableless, or empty."""

    stage = "catalog"


class ConsolidationError(PipelineError):
    """No usable table across the whole fetch batch."""

    stage = "consolidate"


class TransformError(PipelineError):
    """Checkpoint unreadable, or nothing left after tidying."""

    stage = "transform"
