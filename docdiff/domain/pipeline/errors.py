"""Domain-level errors for the diff pipeline.

Only InvalidArgumentError and SourceUnavailableError leave the pipeline;
mapping to HTTP is handled in observability.errors.
"""

from __future__ import annotations

from pathlib import Path


class PipelineError(Exception):
    """Base error for domain pipeline failures."""


class InvalidArgumentError(PipelineError):
    """Raised when a required identifier is missing or a page index is out of range."""


class SourceUnavailableError(PipelineError):
    """Raised when the stored original cannot be located, opened or read."""

    def __init__(self, message: str, *, work_id: str | None = None) -> None:
        super().__init__(message)
        self.work_id = work_id


class PathNotFoundError(PipelineError):
    """Raised by the stored-file resolver when no candidate exists on disk."""

    def __init__(self, ref: str, candidates: list[Path]) -> None:
        super().__init__(f"stored file not found: {ref}")
        self.ref = ref
        self.candidates = candidates
