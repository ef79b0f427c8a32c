"""StructuredOutputPort protocol for the external structuring service."""

from __future__ import annotations

from typing import Any, Protocol


class StructuredOutputPort(Protocol):
    """Returns the raw structuring payload for a work unit, or None when absent."""

    async def get_structured_output(self, work_id: str) -> dict[str, Any] | None: ...
