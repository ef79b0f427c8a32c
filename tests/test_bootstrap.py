from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from docdiff.infrastructure.rendering.bootstrap import (
    CommandResult,
    RenderingBootstrapper,
    package_family,
    parse_os_release,
)


class ScriptedRunner:
    """Answers commands by prefix; unknown commands succeed."""

    def __init__(self, answers: dict[str, list[int | None]] | None = None, raise_on: str | None = None) -> None:
        self.answers = answers or {}
        self.raise_on = raise_on
        self.commands: list[list[str]] = []

    async def __call__(self, cmd: Sequence[str], timeout: float) -> CommandResult:
        line = " ".join(cmd)
        self.commands.append(list(cmd))
        if self.raise_on and self.raise_on in line:
            raise RuntimeError("runner exploded")
        for key, codes in self.answers.items():
            if key in line:
                code = codes.pop(0) if len(codes) > 1 else codes[0]
                return CommandResult(returncode=code)
        return CommandResult(returncode=0)


def _which(available: set[str]):
    return lambda name: f"/usr/bin/{name}" if name in available else None


def _os_release(tmp_path: Path, body: str) -> Path:
    p = tmp_path / "os-release"
    p.write_text(body, encoding="utf-8")
    return p


def test_parse_os_release_and_family() -> None:
    info = parse_os_release('# comment\nID="rocky"\nID_LIKE="rhel centos fedora"\n')
    assert info == {"ID": "rocky", "ID_LIKE": "rhel centos fedora"}
    assert package_family(info) == "rhel"
    assert package_family({"ID": "ubuntu"}) == "debian"
    assert package_family({"ID": "alpine"}) == "alpine"
    assert package_family({"ID": "opensuse-leap"}) == "suse"
    assert package_family({"ID": "plan9"}) is None


@pytest.mark.asyncio
async def test_everything_present_installs_nothing(tmp_path: Path) -> None:
    runner = ScriptedRunner()
    boot = RenderingBootstrapper("python3", runner=runner, which=_which({"pdftoppm"}), is_root=True)
    report = await boot.ensure()
    assert report.complete
    assert report.installs_attempted == []


@pytest.mark.asyncio
async def test_missing_interpreter_stops_early(tmp_path: Path) -> None:
    runner = ScriptedRunner({"import sys": [None]})
    boot = RenderingBootstrapper("nopython", runner=runner, which=_which(set()), is_root=True)
    report = await boot.ensure()
    assert not report.interpreter_available
    assert not report.can_render
    assert len(runner.commands) == 1


@pytest.mark.asyncio
async def test_libraries_installed_with_pip_then_rechecked(tmp_path: Path) -> None:
    runner = ScriptedRunner({"import pdf2image, PIL": [1, 0]})
    boot = RenderingBootstrapper("python3", runner=runner, which=_which({"pdftoppm"}), is_root=True)
    report = await boot.ensure()
    assert report.libraries_available
    assert report.installs_attempted == ["python3 -m pip install --user --quiet pdf2image pillow"]


@pytest.mark.asyncio
async def test_debian_poppler_install_uses_sudo_when_not_root(tmp_path: Path) -> None:
    runner = ScriptedRunner()
    boot = RenderingBootstrapper(
        "python3",
        os_release_path=_os_release(tmp_path, "ID=debian\n"),
        runner=runner,
        which=_which({"sudo"}),
        is_root=False,
    )
    report = await boot.ensure()
    assert report.installs_attempted == [
        "sudo -n apt-get update",
        "sudo -n apt-get install -y poppler-utils",
    ]
    # which() still cannot see pdftoppm afterwards
    assert not report.cli_available
    assert report.can_render


@pytest.mark.asyncio
async def test_alpine_and_suse_commands(tmp_path: Path) -> None:
    alpine = RenderingBootstrapper(
        "python3",
        os_release_path=_os_release(tmp_path, "ID=alpine\n"),
        runner=ScriptedRunner(),
        which=_which(set()),
        is_root=True,
    )
    assert (await alpine.ensure()).installs_attempted == ["apk add --no-cache poppler-utils"]

    suse = RenderingBootstrapper(
        "python3",
        os_release_path=_os_release(tmp_path, 'ID="opensuse-tumbleweed"\n'),
        runner=ScriptedRunner(),
        which=_which(set()),
        is_root=True,
    )
    assert (await suse.ensure()).installs_attempted == ["zypper --non-interactive install poppler-tools"]


@pytest.mark.asyncio
async def test_rhel_prefers_dnf(tmp_path: Path) -> None:
    boot = RenderingBootstrapper(
        "python3",
        os_release_path=_os_release(tmp_path, "ID=fedora\n"),
        runner=ScriptedRunner(),
        which=_which({"dnf"}),
        is_root=True,
    )
    assert (await boot.ensure()).installs_attempted == ["dnf install -y poppler-utils"]


@pytest.mark.asyncio
async def test_unsupported_platform_is_skipped(tmp_path: Path) -> None:
    boot = RenderingBootstrapper(
        "python3",
        os_release_path=tmp_path / "absent",
        runner=ScriptedRunner(),
        which=_which(set()),
        is_root=True,
    )
    report = await boot.ensure()
    assert report.installs_attempted == []
    assert not report.cli_available
    assert report.notes


@pytest.mark.asyncio
async def test_ensure_never_raises(tmp_path: Path) -> None:
    boot = RenderingBootstrapper(
        "python3", runner=ScriptedRunner(raise_on="pdf2image"), which=_which(set()), is_root=True
    )
    report = await boot.ensure()
    assert report.interpreter_available
    assert not report.complete
    assert any("bootstrap error" in n for n in report.notes)
