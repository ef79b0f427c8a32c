"""Synthetic few-shot JSONL generation from a diff report."""

from __future__ import annotations

import logging
from typing import Iterable

from docdiff.application.llm.parsers import strip_code_fences
from docdiff.application.llm.prompts import (
    SYNTHETIC_SYSTEM_PROMPT,
    build_diffs_joined,
    build_synthetic_user_prompt,
    substitute_diffs,
)
from docdiff.domain.ports.vision_port import VisionPort

logger = logging.getLogger(__name__)


def default_prompts(samples: int = 3) -> dict[str, str]:
    return {
        "system_prompt": SYNTHETIC_SYSTEM_PROMPT,
        "user_prompt": build_synthetic_user_prompt(samples),
    }


async def generate_jsonl(
    *,
    work_id: str,
    diffs: Iterable[tuple[int, str]],
    vision_port: VisionPort,
    samples: int = 3,
    prompt: str | None = None,
) -> str:
    """Ask the text model for ``samples`` JSONL lines built from the diffs.

    A caller prompt replaces the default one; ``{{DIFFS}}`` and ``{diffs}``
    in it are substituted with the joined diff text.
    """
    joined = build_diffs_joined(diffs)
    if prompt and prompt.strip():
        user_prompt = substitute_diffs(prompt, joined)
    else:
        user_prompt = build_synthetic_user_prompt(samples, joined)
    content = await vision_port.generate_text(SYNTHETIC_SYSTEM_PROMPT, user_prompt)
    jsonl = strip_code_fences(content)
    logger.info("synthetic_generated", extra={"work_id": work_id, "status": f"{len(jsonl.splitlines())} lines"})
    return jsonl
