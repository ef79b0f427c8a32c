"""AccessPort protocol for work-unit access decisions."""

from __future__ import annotations

from typing import Protocol


class AccessPort(Protocol):
    """Capability check: may this principal read this work unit's data?"""

    async def can_access(self, principal: str, work_id: str) -> bool: ...
