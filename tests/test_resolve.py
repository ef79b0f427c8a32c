from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeWorkUnits
from docdiff.domain.pipeline.errors import PathNotFoundError, SourceUnavailableError
from docdiff.domain.pipeline.models import RunContext, WorkUnit
from docdiff.domain.pipeline.stages.resolve import candidate_paths, resolve_stored_path, run_resolve


def test_candidates_order(tmp_path: Path) -> None:
    cwd = tmp_path / "cwd"
    base = tmp_path / "app"
    assert candidate_paths("a/b.pdf", cwd=cwd, base_dir=base) == [
        cwd / "a/b.pdf",
        base / "a/b.pdf",
        tmp_path / "a/b.pdf",
    ]


def test_absolute_reference_is_the_only_candidate(tmp_path: Path) -> None:
    ref = str(tmp_path / "x.pdf")
    assert candidate_paths(ref, cwd=tmp_path, base_dir=tmp_path) == [Path(ref)]


def test_resolves_against_base_dir_when_cwd_misses(tmp_path: Path) -> None:
    base = tmp_path / "app"
    target = base / "storage" / "doc.pdf"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"%PDF")
    cwd = tmp_path / "elsewhere"
    cwd.mkdir()
    assert resolve_stored_path("storage/doc.pdf", base_dir=base, cwd=cwd) == target.resolve()


def test_resolves_against_base_dir_parent(tmp_path: Path) -> None:
    base = tmp_path / "publish"
    base.mkdir()
    target = tmp_path / "storage" / "doc.pdf"
    target.parent.mkdir(parents=True)
    target.write_bytes(b"%PDF")
    assert resolve_stored_path("storage/doc.pdf", base_dir=base, cwd=base) == target.resolve()


def test_missing_file_raises_with_candidates(tmp_path: Path) -> None:
    with pytest.raises(PathNotFoundError) as exc:
        resolve_stored_path("nope.pdf", base_dir=tmp_path / "app", cwd=tmp_path / "cwd")
    assert len(exc.value.candidates) == 3


@pytest.mark.asyncio
async def test_run_resolve_unknown_work_unit(tmp_path: Path) -> None:
    ctx = RunContext(run_id="r", work_id="w-1")
    with pytest.raises(SourceUnavailableError):
        await run_resolve(ctx, work_units=FakeWorkUnits(), base_dir=tmp_path, cwd=tmp_path)


@pytest.mark.asyncio
async def test_run_resolve_attaches_path(source_pdf: Path) -> None:
    unit = WorkUnit(work_id="w-1", saved_relative_path=str(source_pdf))
    ctx = RunContext(run_id="r", work_id="w-1")
    ctx = await run_resolve(ctx, work_units=FakeWorkUnits({"w-1": unit}), base_dir=source_pdf.parent)
    assert ctx.source_path == source_pdf.resolve()
    assert ctx.work_unit == unit
