from __future__ import annotations

import logging
from pathlib import Path

from docdiff.domain.pipeline.errors import PathNotFoundError, SourceUnavailableError
from docdiff.domain.pipeline.models import RunContext, WorkUnit
from docdiff.domain.ports.work_unit_port import WorkUnitPort

logger = logging.getLogger(__name__)


def candidate_paths(ref: str, *, cwd: Path, base_dir: Path) -> list[Path]:
    """Locations probed for a stored reference, in priority order."""
    p = Path(ref)
    if p.is_absolute():
        return [p]
    candidates = [cwd / p, base_dir / p, base_dir.parent / p]
    unique: list[Path] = []
    for c in candidates:
        if c not in unique:
            unique.append(c)
    return unique


def resolve_stored_path(ref: str, *, base_dir: Path, cwd: Path | None = None) -> Path:
    """Return an existing absolute path for a stored reference.

    Relative references are tried against the working directory, the
    installation directory and its parent. Raises PathNotFoundError when no
    candidate exists.
    """
    here = Path(cwd) if cwd is not None else Path.cwd()
    candidates = candidate_paths(ref, cwd=here, base_dir=Path(base_dir))
    for c in candidates:
        if c.is_file():
            return c.resolve()
    raise PathNotFoundError(ref, candidates)


async def run_resolve(
    context: RunContext,
    *,
    work_units: WorkUnitPort,
    base_dir: Path,
    cwd: Path | None = None,
) -> RunContext:
    """Look up the work unit and attach the resolved original to the context."""
    unit: WorkUnit | None = await work_units.get_work_unit(context.work_id)
    if unit is None or not unit.saved_relative_path:
        raise SourceUnavailableError("stored original not found", work_id=context.work_id)
    try:
        path = resolve_stored_path(unit.saved_relative_path, base_dir=base_dir, cwd=cwd)
    except PathNotFoundError as exc:
        logger.warning(
            "source_path_unresolved",
            extra={"work_id": context.work_id, "path": [str(c) for c in exc.candidates]},
        )
        raise SourceUnavailableError("stored original not found", work_id=context.work_id) from exc

    context.work_unit = unit
    context.source_path = path
    return context
