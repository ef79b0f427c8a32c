"""Ports for page rasterization and its environment bootstrap."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from docdiff.domain.pipeline.models import BootstrapReport, RenderOutcome


class RasterizerPort(Protocol):
    """Renders every page of a document into output_dir. Never raises."""

    async def render(
        self,
        source_path: Path,
        output_dir: Path,
        base_id: str,
        display_name: str,
    ) -> RenderOutcome: ...


class BootstrapPort(Protocol):
    """Makes the rasterization toolchain available where possible. Never raises."""

    async def ensure(self) -> BootstrapReport: ...
