from __future__ import annotations

from pathlib import Path

import pytest

from conftest import write_registry
from docdiff.infrastructure.storage.work_unit_registry import JsonWorkUnitRegistry


@pytest.fixture
def registry(tmp_path: Path) -> JsonWorkUnitRegistry:
    path = write_registry(
        tmp_path / "units.json",
        {
            "w-1": {"owner": "alice", "original_file_name": "a.pdf", "saved_relative_path": "storage/a.pdf"},
            "w-2": {"owner": "bob", "file_size": "not-a-number"},
        },
    )
    return JsonWorkUnitRegistry(path, admin_principals=["root"])


@pytest.mark.asyncio
async def test_get_work_unit(registry: JsonWorkUnitRegistry) -> None:
    unit = await registry.get_work_unit("w-1")
    assert unit is not None
    assert unit.owner == "alice"
    assert unit.saved_relative_path == "storage/a.pdf"
    assert await registry.get_work_unit("missing") is None
    assert await registry.get_work_unit("w-2") is None


@pytest.mark.asyncio
async def test_access_rules(registry: JsonWorkUnitRegistry) -> None:
    assert await registry.can_access("alice", "w-1")
    assert not await registry.can_access("bob", "w-1")
    assert await registry.can_access("root", "w-1")
    assert not await registry.can_access("", "w-1")


@pytest.mark.asyncio
async def test_missing_or_broken_file_is_empty(tmp_path: Path) -> None:
    assert await JsonWorkUnitRegistry(tmp_path / "none.json").get_work_unit("w") is None
    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    assert await JsonWorkUnitRegistry(broken).get_work_unit("w") is None
