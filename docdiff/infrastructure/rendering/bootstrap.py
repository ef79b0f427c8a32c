"""Best-effort provisioning of the page-rendering toolchain.

Probes, in order, the Python interpreter, the pdf2image/Pillow libraries and
the poppler ``pdftoppm`` binary, installing what is missing when it can.
Nothing here raises: every shortfall ends up in the BootstrapReport notes.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Sequence

from docdiff.domain.pipeline.models import BootstrapReport
from docdiff.domain.ports.rendering_port import BootstrapPort

logger = logging.getLogger(__name__)

_TAIL_CHARS = 2000


@dataclass
class CommandResult:
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


Runner = Callable[[Sequence[str], float], Awaitable[CommandResult]]


async def run_command(cmd: Sequence[str], timeout: float) -> CommandResult:
    """Run a command with a bounded wait. OS errors and timeouts become results."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        return CommandResult(returncode=None, stderr=str(exc))
    try:
        out, err = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        return CommandResult(returncode=None, stderr=f"timed out after {timeout}s", timed_out=True)
    return CommandResult(
        returncode=proc.returncode,
        stdout=out.decode("utf-8", errors="replace")[-_TAIL_CHARS:],
        stderr=err.decode("utf-8", errors="replace")[-_TAIL_CHARS:],
    )


def parse_os_release(text: str) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def package_family(os_release: dict[str, str]) -> str | None:
    ids = [os_release.get("ID", "").lower(), *os_release.get("ID_LIKE", "").lower().split()]
    for ident in ids:
        if ident in ("debian", "ubuntu"):
            return "debian"
        if ident in ("rhel", "fedora", "centos", "amzn"):
            return "rhel"
        if ident == "alpine":
            return "alpine"
        if "suse" in ident:
            return "suse"
    return None


class RenderingBootstrapper(BootstrapPort):
    def __init__(
        self,
        python_bin: str,
        *,
        os_release_path: Path = Path("/etc/os-release"),
        timeout_seconds: float = 300,
        runner: Runner = run_command,
        which: Callable[[str], str | None] = shutil.which,
        is_root: bool | None = None,
    ) -> None:
        self._python = python_bin
        self._os_release_path = Path(os_release_path)
        self._timeout = timeout_seconds
        self._run = runner
        self._which = which
        self._is_root = is_root if is_root is not None else (hasattr(os, "geteuid") and os.geteuid() == 0)

    async def _probe(self, code: str) -> bool:
        res = await self._run([self._python, "-c", code], self._timeout)
        return res.ok

    async def _attempt(self, cmd: list[str], report: BootstrapReport) -> bool:
        report.installs_attempted.append(" ".join(cmd))
        res = await self._run(cmd, self._timeout)
        if not res.ok:
            logger.warning(
                "bootstrap_command_failed",
                extra={"status": " ".join(cmd), "returncode": res.returncode, "error": res.stderr[-500:]},
            )
        return res.ok

    def _privileged(self, cmd: list[str]) -> list[str]:
        if not self._is_root and self._which("sudo"):
            return ["sudo", "-n", *cmd]
        return cmd

    def _install_commands(self, family: str) -> list[list[str]]:
        if family == "debian":
            return [["apt-get", "update"], ["apt-get", "install", "-y", "poppler-utils"]]
        if family == "rhel":
            tool = "dnf" if self._which("dnf") else "yum"
            return [[tool, "install", "-y", "poppler-utils"]]
        if family == "alpine":
            return [["apk", "add", "--no-cache", "poppler-utils"]]
        if family == "suse":
            return [["zypper", "--non-interactive", "install", "poppler-tools"]]
        return []

    def _read_os_release(self) -> dict[str, str]:
        try:
            return parse_os_release(self._os_release_path.read_text(encoding="utf-8"))
        except OSError:
            return {}

    async def _ensure_libraries(self, report: BootstrapReport) -> None:
        probe = "import pdf2image, PIL"
        if await self._probe(probe):
            report.libraries_available = True
            return
        await self._attempt(
            [self._python, "-m", "pip", "install", "--user", "--quiet", "pdf2image", "pillow"], report
        )
        report.libraries_available = await self._probe(probe)
        if not report.libraries_available:
            report.notes.append("pdf2image/Pillow unavailable")

    async def _ensure_cli(self, report: BootstrapReport) -> None:
        if self._which("pdftoppm"):
            report.cli_available = True
            return
        family = package_family(self._read_os_release())
        if family is None:
            logger.warning("bootstrap_unsupported_platform", extra={"path": str(self._os_release_path)})
            report.notes.append("pdftoppm missing; unsupported package manager")
            return
        for cmd in self._install_commands(family):
            if not await self._attempt(self._privileged(cmd), report):
                break
        report.cli_available = self._which("pdftoppm") is not None
        if not report.cli_available:
            report.notes.append("pdftoppm unavailable")

    async def ensure(self) -> BootstrapReport:
        report = BootstrapReport()
        try:
            report.interpreter_available = await self._probe("import sys")
            if not report.interpreter_available:
                report.notes.append(f"interpreter {self._python!r} not invocable")
                return report
            await self._ensure_libraries(report)
            await self._ensure_cli(report)
        except Exception as exc:  # ensure() never raises
            logger.error("bootstrap_failed", extra={"error": str(exc)})
            report.notes.append(f"bootstrap error: {exc}")
        logger.info(
            "bootstrap_checked",
            extra={
                "status": "complete" if report.complete else "incomplete",
                "reason": "; ".join(report.notes),
            },
        )
        return report
