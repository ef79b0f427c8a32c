from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from docdiff.domain.pipeline.constants import DEGRADED_NARRATIVE, DIFF_SYSTEM_PROMPT, PAGE_HEADER_TEMPLATE
from docdiff.domain.pipeline.models import DegradedReason, PageOutcome
from docdiff.domain.ports.vision_port import VisionPort

logger = logging.getLogger(__name__)


def build_page_prompt(page_number: int, structured_text: str) -> str:
    body = structured_text if structured_text else "(no text was extracted for this page)"
    return (
        f"Page {page_number} of the document.\n"
        "Below is the text the structuring process extracted for this page. "
        "Compare it with the attached page image and list the discrepancies.\n\n"
        f"EXTRACTED TEXT (page {page_number}):\n{body}"
    )


def image_format_for(path: Path) -> str:
    suffix = path.suffix.lower().lstrip(".")
    return "jpeg" if suffix in {"jpg", "jpeg"} else suffix or "png"


def render_narrative(page_number: int, outcome: PageOutcome) -> str:
    """Page header line followed by the narrative or the degraded placeholder."""
    header = PAGE_HEADER_TEMPLATE.format(page=page_number)
    body = outcome.narrative if not outcome.degraded and outcome.narrative else DEGRADED_NARRATIVE
    return f"{header}\n{body}\n"


async def report_page(
    page_number: int,
    structured_text: str,
    images: Sequence[Path],
    *,
    vision_port: VisionPort,
) -> PageOutcome:
    """Ask the vision model what differs between the page image and its text.

    Never raises: missing images, unreadable files and failed or empty model
    calls come back as a degraded outcome.
    """
    if not images:
        return PageOutcome.degrade(DegradedReason.NO_IMAGE)

    image_path = images[0]
    try:
        image_bytes = image_path.read_bytes()
    except OSError as exc:
        logger.warning("page_image_unreadable", extra={"page": page_number, "path": str(image_path), "error": str(exc)})
        return PageOutcome.degrade(DegradedReason.IMAGE_UNREADABLE, image_path)

    try:
        narrative = await vision_port.generate_vision(
            DIFF_SYSTEM_PROMPT,
            build_page_prompt(page_number, structured_text),
            image_bytes,
            image_format_for(image_path),
        )
    except Exception as exc:
        logger.warning("vision_call_failed", extra={"page": page_number, "error": str(exc)})
        return PageOutcome.degrade(DegradedReason.VISION_FAILED, image_path)

    if not narrative or not narrative.strip():
        return PageOutcome.degrade(DegradedReason.EMPTY_RESPONSE, image_path)
    return PageOutcome.ok(narrative.strip(), image_path)
