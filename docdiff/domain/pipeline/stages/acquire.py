from __future__ import annotations

from docdiff.domain.pipeline.errors import InvalidArgumentError
from docdiff.domain.pipeline.models import RunContext


def run_acquire(context: RunContext, *, target_page: int | None = None) -> RunContext:
    """Validate request fields before any I/O happens."""
    if not context.work_id or not context.work_id.strip():
        raise InvalidArgumentError("work_id is required")
    if target_page is not None and target_page < 0:
        raise InvalidArgumentError(f"page_no must be >= 0, got {target_page}")
    context.work_id = context.work_id.strip()
    return context
