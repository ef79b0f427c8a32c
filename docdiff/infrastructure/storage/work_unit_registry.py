"""JSON-file work-unit registry implementing WorkUnitPort and AccessPort.

Layout of the registry file::

    {
      "<work_id>": {
        "owner": "alice",
        "original_file_name": "contract.pdf",
        "saved_relative_path": "storage/original-uploads/2025/01/02/alice/<work_id>/contract.pdf",
        "structured_ref": "<work_id>",
        "file_size": 12345
      }
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from pydantic import ValidationError

from docdiff.domain.pipeline.models import WorkUnit
from docdiff.domain.ports.access_port import AccessPort
from docdiff.domain.ports.work_unit_port import WorkUnitPort

logger = logging.getLogger(__name__)


class JsonWorkUnitRegistry(WorkUnitPort, AccessPort):
    """Reads the registry on every call so concurrent writers are picked up."""

    def __init__(self, registry_path: Path, *, admin_principals: Iterable[str] = ()) -> None:
        self._path = Path(registry_path)
        self._admins = {a for a in admin_principals if a}

    def _load(self) -> dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("work_unit_registry_unreadable", extra={"path": str(self._path), "error": str(exc)})
            return {}
        return data if isinstance(data, dict) else {}

    async def get_work_unit(self, work_id: str) -> WorkUnit | None:
        entry = self._load().get(work_id)
        if not isinstance(entry, dict):
            return None
        try:
            return WorkUnit(work_id=work_id, **{k: v for k, v in entry.items() if k != "work_id"})
        except ValidationError as exc:
            logger.warning("work_unit_invalid", extra={"work_id": work_id, "error": str(exc)})
            return None

    async def can_access(self, principal: str, work_id: str) -> bool:
        if not principal:
            return False
        if principal in self._admins:
            return True
        unit = await self.get_work_unit(work_id)
        return unit is not None and unit.owner == principal
