from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from docdiff.domain.pipeline.constants import IMAGE_SUFFIXES, RUN_DIR_PREFIX
from docdiff.domain.pipeline.models import BootstrapReport, RasterState, RenderOutcome, RunContext
from docdiff.domain.ports.rendering_port import BootstrapPort, RasterizerPort

logger = logging.getLogger(__name__)


def _safe_id(work_id: str) -> str:
    return re.sub(r"[^A-Za-z0-9._-]", "_", work_id)


def make_run_dir(artifact_root: Path, work_id: str, now: datetime | None = None) -> Path:
    """Run-scoped output directory; unique per run through its timestamp."""
    ts = (now or datetime.now(timezone.utc)).strftime("%Y%m%d%H%M%S%f")
    safe_id = _safe_id(work_id)
    return Path(artifact_root) / f"{RUN_DIR_PREFIX}{safe_id}_{ts}"


def _page_suffix_re(page_number: int) -> re.Pattern[str]:
    exts = "|".join(s.lstrip(".") for s in IMAGE_SUFFIXES)
    return re.compile(
        rf"(?:_page_|_p|-)0*{page_number}\.(?:{exts})$",
        re.IGNORECASE,
    )


def _belongs_to(rel: Path, base_id: str) -> bool:
    """True when the work id appears in the relative path as a whole token.

    Accepted: a directory named after the work id or a run directory
    ``pdf_<id>`` / ``pdf_<id>_<suffix>``, or a file named ``<id>_...`` or
    ``<id>-...``. Work id ``12`` never matches artifacts of ``123``.
    """
    ids = {base_id, _safe_id(base_id)}
    for part in rel.parts[:-1]:
        for ident in ids:
            run_dir = f"{RUN_DIR_PREFIX}{ident}"
            if part in (ident, run_dir) or part.startswith(f"{run_dir}_"):
                return True
    name = rel.name
    return any(re.match(rf"{re.escape(ident)}[_-]", name) for ident in ids)


def _scan_root(root: Path, base_id: str, pattern: re.Pattern[str]) -> list[Path]:
    if not root.is_dir():
        return []
    found: list[Path] = []
    try:
        for p in root.rglob("*"):
            if not pattern.search(p.name):
                continue
            if base_id and not _belongs_to(p.relative_to(root), base_id):
                continue
            if p.is_file():
                found.append(p)
    except OSError as exc:
        logger.debug("artifact_scan_failed", extra={"path": str(root), "error": str(exc)})
    return sorted(found, key=lambda p: str(p))


def find_page_images(page_number: int, roots: Iterable[Path], base_id: str) -> list[Path]:
    """Candidate images for one page.

    Roots are tried in order and the first root with a match wins; within a
    root candidates are sorted lexicographically.
    """
    pattern = _page_suffix_re(page_number)
    for root in roots:
        found = _scan_root(Path(root), base_id, pattern)
        if found:
            return found
    return []


def discovery_roots(context: RunContext, shared_roots: Iterable[Path]) -> list[Path]:
    roots: list[Path] = []
    if context.run_dir is not None:
        roots.append(context.run_dir)
    for r in shared_roots:
        if r not in roots:
            roots.append(r)
    return roots


async def _generate(
    context: RunContext,
    *,
    rasterizer: RasterizerPort,
    bootstrapper: BootstrapPort | None,
) -> RenderOutcome:
    if bootstrapper is not None:
        report = await bootstrapper.ensure()
    else:
        report = BootstrapReport(interpreter_available=True, libraries_available=True, cli_available=True)
    context.bootstrap = report
    if not report.complete:
        logger.warning(
            "bootstrap_incomplete",
            extra={"run_id": context.run_id, "work_id": context.work_id, "reason": "; ".join(report.notes)},
        )
    if not report.can_render:
        return RenderOutcome(status="skipped", stderr_tail="interpreter unavailable")
    if context.source_path is None or context.run_dir is None:
        return RenderOutcome(status="skipped", stderr_tail="source or run directory missing")

    display_name = (context.work_unit.original_file_name if context.work_unit else None) or context.source_path.name
    return await rasterizer.render(context.source_path, context.run_dir, context.work_id, display_name)


async def ensure_page_images(
    context: RunContext,
    page_number: int,
    *,
    rasterizer: RasterizerPort,
    bootstrapper: BootstrapPort | None,
    shared_roots: Iterable[Path],
) -> list[Path]:
    """Return candidate images for a page, rendering the document at most once per run.

    The first page that finds nothing moves the run to ATTEMPTED and launches
    a single rasterization for the whole document. Later pages only re-scan,
    whether or not that attempt produced anything.
    """
    roots = discovery_roots(context, shared_roots)
    images = find_page_images(page_number, roots, context.work_id)
    if images or context.raster_state is RasterState.ATTEMPTED:
        return images

    context.raster_state = RasterState.ATTEMPTED
    outcome = await _generate(context, rasterizer=rasterizer, bootstrapper=bootstrapper)
    context.render = outcome
    logger.info(
        "rasterization_attempted",
        extra={
            "run_id": context.run_id,
            "work_id": context.work_id,
            "status": outcome.status,
            "returncode": outcome.returncode,
        },
    )
    return find_page_images(page_number, roots, context.work_id)
