from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from docdiff.domain.pipeline.errors import SourceUnavailableError
from docdiff.domain.pipeline.models import PageTextPair, ReconciledPages, RunContext, StructuredOutput
from docdiff.domain.pipeline.normalize import normalize_text
from docdiff.domain.pipeline.paging import page_range
from docdiff.domain.pipeline.structured import parse_structured_output
from docdiff.domain.ports.structured_port import StructuredOutputPort
from docdiff.domain.ports.text_port import PageTextPort

logger = logging.getLogger(__name__)


def _extract_original(path: Path, text_port: PageTextPort) -> dict[int, str]:
    with path.open("rb") as fh:
        return text_port.extract_text_by_page(fh)


def reconcile_pages(original: dict[int, str], structured: StructuredOutput) -> ReconciledPages:
    """Pair normalized original and structured text for every page in range.

    The range runs to the larger page count of the two sources; a page
    missing on one side gets an empty string there.
    """
    max_page = max(max(original, default=0), structured.max_page)
    pages: dict[int, PageTextPair] = {}
    for n in page_range(max_page):
        pages[n] = PageTextPair(
            page_number=n,
            original=normalize_text(original.get(n)),
            structured=normalize_text(structured.pages.get(n)),
        )
    return ReconciledPages(pages=pages, max_page=max(max_page, 1), structured_kind=structured.kind)


async def run_reconcile(
    context: RunContext,
    *,
    text_port: PageTextPort,
    structured_port: StructuredOutputPort,
) -> ReconciledPages:
    """Fetch both text sources for the run's document and reconcile them.

    Raises SourceUnavailableError when the original cannot be read; a failing
    structuring service is treated as absent output.
    """
    if context.source_path is None:
        raise SourceUnavailableError("source path is not resolved", work_id=context.work_id)

    try:
        original = await asyncio.to_thread(_extract_original, context.source_path, text_port)
    except OSError as exc:
        logger.error(
            "source_unreadable",
            extra={"work_id": context.work_id, "path": str(context.source_path), "error": str(exc)},
        )
        raise SourceUnavailableError("stored original is unreadable", work_id=context.work_id) from exc

    try:
        raw = await structured_port.get_structured_output(context.work_id)
    except Exception as exc:
        logger.warning(
            "structured_output_unavailable",
            extra={"work_id": context.work_id, "error": str(exc)},
        )
        raw = None
    structured = parse_structured_output(raw)

    reconciled = reconcile_pages(original, structured)
    context.meta["original_pages"] = max(original, default=0)
    context.meta["structured_kind"] = structured.kind
    context.artifacts["reconciled"] = reconciled
    logger.info(
        "reconciled",
        extra={
            "run_id": context.run_id,
            "work_id": context.work_id,
            "status": structured.kind,
            "page": reconciled.max_page,
        },
    )
    return reconciled
