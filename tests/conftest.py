from __future__ import annotations

import json
from pathlib import Path
from typing import Any, BinaryIO

import pytest

from docdiff.core.config import get_settings
from docdiff.domain.pipeline.models import BootstrapReport, RenderOutcome, WorkUnit


class FakeWorkUnits:
    def __init__(self, units: dict[str, WorkUnit] | None = None) -> None:
        self.units = units or {}

    async def get_work_unit(self, work_id: str) -> WorkUnit | None:
        return self.units.get(work_id)


class FakeTextPort:
    def __init__(self, pages: dict[int, str] | None = None, error: Exception | None = None) -> None:
        self.pages = pages or {}
        self.error = error
        self.calls = 0

    def extract_text_by_page(self, fileobj: BinaryIO) -> dict[int, str]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return dict(self.pages)


class FakeStructured:
    def __init__(self, payload: dict[str, Any] | None = None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error

    async def get_structured_output(self, work_id: str) -> dict[str, Any] | None:
        if self.error is not None:
            raise self.error
        return self.payload


class FakeVision:
    def __init__(self, reply: str = "No differences", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.vision_calls: list[dict[str, Any]] = []
        self.text_calls: list[tuple[str, str]] = []

    async def generate_vision(self, system_prompt, user_prompt, image_bytes, image_format="png") -> str:
        self.vision_calls.append(
            {"system": system_prompt, "user": user_prompt, "bytes": image_bytes, "format": image_format}
        )
        if self.error is not None:
            raise self.error
        return self.reply

    async def generate_text(self, system_prompt: str, user_prompt: str) -> str:
        self.text_calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.reply


class FakeRasterizer:
    """Writes ``<base_id>_page_<n>.png`` for the given pages, or fails."""

    def __init__(self, pages: int = 0, status: str = "ok") -> None:
        self.pages = pages
        self.status = status
        self.calls: list[tuple[Path, Path, str, str]] = []

    async def render(self, source_path: Path, output_dir: Path, base_id: str, display_name: str) -> RenderOutcome:
        self.calls.append((source_path, output_dir, base_id, display_name))
        if self.status != "ok":
            return RenderOutcome(status=self.status, returncode=1)
        output_dir.mkdir(parents=True, exist_ok=True)
        for n in range(1, self.pages + 1):
            (output_dir / f"{base_id}_page_{n}.png").write_bytes(b"\x89PNG fake " + str(n).encode())
        return RenderOutcome(status="ok", returncode=0, output_dir=output_dir)


class FakeBootstrapper:
    def __init__(self, report: BootstrapReport | None = None) -> None:
        self.report = report or BootstrapReport(
            interpreter_available=True, libraries_available=True, cli_available=True
        )
        self.calls = 0

    async def ensure(self) -> BootstrapReport:
        self.calls += 1
        return self.report


@pytest.fixture
def source_pdf(tmp_path: Path) -> Path:
    p = tmp_path / "uploads" / "doc.pdf"
    p.parent.mkdir(parents=True)
    p.write_bytes(b"%PDF-1.4\n%stub\n")
    return p


@pytest.fixture
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point every filesystem setting at tmp_path for the duration of a test."""
    artifacts = tmp_path / "artifacts"
    registry = tmp_path / "work_units.json"
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DOCDIFF_ARTIFACT_ROOT", str(artifacts))
    monkeypatch.setenv("DOCDIFF_APP_BASE_DIR", str(tmp_path / "app"))
    monkeypatch.setenv("DOCDIFF_WORK_UNITS_FILE", str(registry))
    monkeypatch.setenv("DOCDIFF_BOOTSTRAP_ENABLED", "false")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


def write_registry(path: Path, units: dict[str, dict[str, Any]]) -> Path:
    path.write_text(json.dumps(units), encoding="utf-8")
    return path
