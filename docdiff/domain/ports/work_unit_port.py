"""WorkUnitPort protocol for work-unit metadata lookups."""

from __future__ import annotations

from typing import Protocol

from docdiff.domain.pipeline.models import WorkUnit


class WorkUnitPort(Protocol):
    """Read-only access to the work units recorded at ingestion."""

    async def get_work_unit(self, work_id: str) -> WorkUnit | None: ...
