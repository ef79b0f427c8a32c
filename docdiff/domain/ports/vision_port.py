"""VisionPort protocol for text/vision generation."""

from __future__ import annotations

from typing import Protocol


class VisionPort(Protocol):
    """Abstraction over the generation model used by the pipeline."""

    async def generate_vision(
        self,
        system_prompt: str,
        user_prompt: str,
        image_bytes: bytes,
        image_format: str = "png",
    ) -> str: ...

    async def generate_text(self, system_prompt: str, user_prompt: str) -> str: ...
