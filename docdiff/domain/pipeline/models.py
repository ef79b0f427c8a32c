"""Domain models for the diff pipeline."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field


class WorkUnit(BaseModel):
    """One document-processing job as recorded at ingestion time."""

    work_id: str
    owner: str | None = None
    original_file_name: str | None = None
    saved_relative_path: str | None = None
    structured_ref: str | None = None
    file_size: int | None = None


class StructuredOutput(BaseModel):
    """Structuring-service output resolved to a single shape.

    ``pages`` is keyed by 1-based page number (the 0-based list index is
    already shifted). ``flat`` outputs carry their text as page 1.
    """

    kind: Literal["per_page", "flat", "absent"]
    pages: dict[int, str] = Field(default_factory=dict)
    text: str = ""

    @property
    def max_page(self) -> int:
        return max(self.pages) if self.pages else 0


class PageTextPair(BaseModel):
    page_number: int
    original: str = ""
    structured: str = ""


class ReconciledPages(BaseModel):
    pages: dict[int, PageTextPair]
    max_page: int
    structured_kind: Literal["per_page", "flat", "absent"] = "absent"


class RasterState(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    ATTEMPTED = "attempted"


class BootstrapReport(BaseModel):
    """Outcome of the rendering-environment check. Never raised."""

    interpreter_available: bool = False
    libraries_available: bool = False
    cli_available: bool = False
    installs_attempted: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)

    @property
    def can_render(self) -> bool:
        return self.interpreter_available

    @property
    def complete(self) -> bool:
        return self.interpreter_available and self.libraries_available and self.cli_available


class RenderOutcome(BaseModel):
    status: Literal["ok", "failed", "timeout", "skipped", "error"]
    returncode: int | None = None
    stdout_tail: str = ""
    stderr_tail: str = ""
    output_dir: Path | None = None
    duration_seconds: float | None = None


class DegradedReason(str, Enum):
    NO_IMAGE = "no_image"
    IMAGE_UNREADABLE = "image_unreadable"
    VISION_FAILED = "vision_failed"
    EMPTY_RESPONSE = "empty_response"


class PageOutcome(BaseModel):
    """Either a narrative or the reason the page could not be analyzed."""

    narrative: str | None = None
    degraded_reason: DegradedReason | None = None
    image_path: Path | None = None

    @property
    def degraded(self) -> bool:
        return self.degraded_reason is not None

    @classmethod
    def ok(cls, narrative: str, image_path: Path | None = None) -> "PageOutcome":
        return cls(narrative=narrative, image_path=image_path)

    @classmethod
    def degrade(cls, reason: DegradedReason, image_path: Path | None = None) -> "PageOutcome":
        return cls(degraded_reason=reason, image_path=image_path)


class PageDiff(BaseModel):
    page_no: int  # 0-based
    diff_text: str
    details: str  # legacy duplicate of diff_text
    degraded: bool = False


class DiffAnalyzeResult(BaseModel):
    summary: Any = None
    page_diffs: list[PageDiff] = Field(default_factory=list)


class RunContext(BaseModel):
    """State carried through every step of one pipeline run."""

    run_id: str
    work_id: str
    principal: str | None = None
    work_unit: WorkUnit | None = None
    source_path: Path | None = None
    run_dir: Path | None = None
    raster_state: RasterState = RasterState.NOT_ATTEMPTED
    bootstrap: BootstrapReport | None = None
    render: RenderOutcome | None = None
    artifacts: dict[str, Any] = Field(default_factory=dict)
    meta: dict[str, Any] = Field(default_factory=dict)
