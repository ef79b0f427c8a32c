"""Diff pipeline orchestrator.

resolve -> reconcile -> per page (ascending): images (rendered at most once
per run) -> vision report. Only InvalidArgumentError and
SourceUnavailableError escape; everything else degrades per page.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable

from docdiff.domain.pipeline.errors import InvalidArgumentError
from docdiff.domain.pipeline.models import DiffAnalyzeResult, PageDiff, RunContext
from docdiff.domain.pipeline.paging import page_number_to_report_index, page_range, report_index_to_page_number
from docdiff.domain.pipeline.stages.acquire import run_acquire
from docdiff.domain.pipeline.stages.rasterize import ensure_page_images
from docdiff.domain.pipeline.stages.reconcile import run_reconcile
from docdiff.domain.pipeline.stages.resolve import run_resolve
from docdiff.domain.pipeline.stages.vision import render_narrative, report_page
from docdiff.domain.ports.rendering_port import BootstrapPort, RasterizerPort
from docdiff.domain.ports.structured_port import StructuredOutputPort
from docdiff.domain.ports.text_port import PageTextPort
from docdiff.domain.ports.vision_port import VisionPort
from docdiff.domain.ports.work_unit_port import WorkUnitPort
from docdiff.observability.metrics import inc_page_degraded, inc_rasterizer_invocation, record_stage_duration

logger = logging.getLogger(__name__)


async def run_pipeline(
    *,
    context: RunContext,
    work_units: WorkUnitPort,
    text_port: PageTextPort,
    structured_port: StructuredOutputPort,
    vision_port: VisionPort,
    rasterizer: RasterizerPort,
    bootstrapper: BootstrapPort | None,
    base_dir: Path,
    shared_roots: Iterable[Path],
    target_page: int | None = None,
    cwd: Path | None = None,
) -> DiffAnalyzeResult:
    """Analyze one work unit and return its ordered per-page report.

    target_page is a 0-based report index; when given only that page is
    analyzed.
    """
    ctx = run_acquire(context, target_page=target_page)
    shared = list(shared_roots)

    t0 = time.perf_counter()
    ctx = await run_resolve(ctx, work_units=work_units, base_dir=base_dir, cwd=cwd)
    record_stage_duration("resolve", time.perf_counter() - t0)

    t0 = time.perf_counter()
    reconciled = await run_reconcile(ctx, text_port=text_port, structured_port=structured_port)
    record_stage_duration("reconcile", time.perf_counter() - t0)

    page_numbers = list(page_range(reconciled.max_page))
    if target_page is not None:
        wanted = report_index_to_page_number(target_page)
        if wanted not in reconciled.pages:
            raise InvalidArgumentError(
                f"page_no {target_page} is out of range (document has {reconciled.max_page} pages)"
            )
        page_numbers = [wanted]

    result = DiffAnalyzeResult()
    for n in page_numbers:
        t0 = time.perf_counter()
        pair = reconciled.pages[n]
        images = await ensure_page_images(
            ctx,
            n,
            rasterizer=rasterizer,
            bootstrapper=bootstrapper,
            shared_roots=shared,
        )
        outcome = await report_page(n, pair.structured, images, vision_port=vision_port)
        text = render_narrative(n, outcome)
        result.page_diffs.append(
            PageDiff(
                page_no=page_number_to_report_index(n),
                diff_text=text,
                details=text,
                degraded=outcome.degraded,
            )
        )
        if outcome.degraded:
            inc_page_degraded(outcome.degraded_reason.value)
            logger.info(
                "page_degraded",
                extra={"run_id": ctx.run_id, "page": n, "reason": outcome.degraded_reason.value},
            )
        record_stage_duration("page", time.perf_counter() - t0)

    if ctx.render is not None:
        inc_rasterizer_invocation(ctx.render.status)

    result.page_diffs.sort(key=lambda d: d.page_no)
    return result
