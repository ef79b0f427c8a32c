from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from docdiff.domain.pipeline.models import RenderOutcome
from docdiff.domain.ports.rendering_port import RasterizerPort

logger = logging.getLogger(__name__)

_TAIL_CHARS = 2000


def _tail(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")[-_TAIL_CHARS:]


class SubprocessRasterizer(RasterizerPort):
    """Renders a document by running the page-rendering script out of process.

    A timed-out process is left running; its output may still land in the
    run directory and is picked up by later scans.
    """

    def __init__(
        self,
        python_bin: str,
        script: Path,
        *,
        dpi: int = 200,
        fmt: str = "png",
        timeout_seconds: float = 60,
    ) -> None:
        self._python = python_bin
        self._script = Path(script)
        self._dpi = dpi
        self._fmt = fmt
        self._timeout = timeout_seconds

    def command(self, source_path: Path, output_dir: Path, base_id: str, display_name: str) -> list[str]:
        return [
            self._python,
            str(self._script),
            str(source_path),
            str(output_dir),
            base_id,
            display_name,
            "--dpi",
            str(self._dpi),
            "--format",
            self._fmt,
        ]

    async def render(
        self,
        source_path: Path,
        output_dir: Path,
        base_id: str,
        display_name: str,
    ) -> RenderOutcome:
        t0 = time.perf_counter()
        cmd = self.command(source_path, output_dir, base_id, display_name)
        try:
            Path(output_dir).mkdir(parents=True, exist_ok=True)
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            logger.error("rasterizer_launch_failed", extra={"path": str(source_path), "error": str(exc)})
            return RenderOutcome(
                status="error",
                stderr_tail=str(exc),
                output_dir=Path(output_dir),
                duration_seconds=time.perf_counter() - t0,
            )

        try:
            out, err = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "rasterizer_timeout",
                extra={"path": str(source_path), "duration_ms": int(self._timeout * 1000)},
            )
            return RenderOutcome(
                status="timeout",
                output_dir=Path(output_dir),
                duration_seconds=time.perf_counter() - t0,
            )

        elapsed = time.perf_counter() - t0
        outcome = RenderOutcome(
            status="ok" if proc.returncode == 0 else "failed",
            returncode=proc.returncode,
            stdout_tail=_tail(out),
            stderr_tail=_tail(err),
            output_dir=Path(output_dir),
            duration_seconds=elapsed,
        )
        if outcome.status == "failed":
            logger.warning(
                "rasterizer_failed",
                extra={"returncode": proc.returncode, "error": outcome.stderr_tail[-500:]},
            )
        else:
            logger.info("rasterizer_done", extra={"duration_ms": int(elapsed * 1000)})
        return outcome
