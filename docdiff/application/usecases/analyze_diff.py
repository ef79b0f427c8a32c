"""Diff-analyze use-case.

Builds the RunContext for one request (fresh run id, run-scoped artifact
directory) and hands it to the domain pipeline together with the ports.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from docdiff.core.config import get_settings
from docdiff.domain.pipeline.models import DiffAnalyzeResult, RunContext
from docdiff.domain.pipeline.orchestrator import run_pipeline
from docdiff.domain.pipeline.stages.rasterize import make_run_dir
from docdiff.domain.ports.rendering_port import BootstrapPort, RasterizerPort
from docdiff.domain.ports.structured_port import StructuredOutputPort
from docdiff.domain.ports.text_port import PageTextPort
from docdiff.domain.ports.vision_port import VisionPort
from docdiff.domain.ports.work_unit_port import WorkUnitPort
from docdiff.observability.metrics import record_pipeline_duration

logger = logging.getLogger(__name__)


@dataclass
class DiffPorts:
    work_units: WorkUnitPort
    text: PageTextPort
    structured: StructuredOutputPort
    vision: VisionPort
    rasterizer: RasterizerPort
    bootstrapper: BootstrapPort | None


async def analyze_diff(
    *,
    work_id: str,
    principal: str | None,
    ports: DiffPorts,
    target_page: int | None = None,
    run_id: str | None = None,
    cwd: Path | None = None,
) -> DiffAnalyzeResult:
    settings = get_settings()
    rid = run_id or str(uuid.uuid4())
    ctx = RunContext(
        run_id=rid,
        work_id=work_id or "",
        principal=principal,
        run_dir=make_run_dir(Path(settings.ARTIFACT_ROOT), (work_id or "").strip() or "unknown"),
    )
    logger.info("diff_analyze_started", extra={"run_id": rid, "work_id": work_id, "principal": principal})

    t0 = time.perf_counter()
    try:
        result = await run_pipeline(
            context=ctx,
            work_units=ports.work_units,
            text_port=ports.text,
            structured_port=ports.structured,
            vision_port=ports.vision,
            rasterizer=ports.rasterizer,
            bootstrapper=ports.bootstrapper,
            base_dir=Path(settings.APP_BASE_DIR),
            shared_roots=settings.shared_artifact_roots(cwd),
            target_page=target_page,
            cwd=cwd,
        )
    finally:
        record_pipeline_duration(time.perf_counter() - t0)

    degraded = sum(1 for d in result.page_diffs if d.degraded)
    logger.info(
        "diff_analyze_completed",
        extra={
            "run_id": rid,
            "work_id": work_id,
            "status": f"{len(result.page_diffs)} pages, {degraded} degraded",
            "duration_ms": int((time.perf_counter() - t0) * 1000),
        },
    )
    return result
