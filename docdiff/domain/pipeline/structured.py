from __future__ import annotations

from typing import Any

from docdiff.domain.pipeline.models import StructuredOutput
from docdiff.domain.pipeline.paging import structured_index_to_page_number


def _entries(raw: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = raw.get(key)
    if not isinstance(value, list):
        return []
    return [e for e in value if isinstance(e, dict)]


def parse_structured_output(raw: dict[str, Any] | None) -> StructuredOutput:
    """Resolve the structuring service payload into one of its known shapes.

    ``page_text_list`` wins over ``text_list``; anything else is absent.
    """
    if not isinstance(raw, dict):
        return StructuredOutput(kind="absent")

    page_entries = _entries(raw, "page_text_list")
    if page_entries:
        pages: dict[int, str] = {}
        for pos, entry in enumerate(page_entries):
            try:
                index = int(entry.get("page_no", pos))
            except (TypeError, ValueError):
                index = pos
            pages[structured_index_to_page_number(index)] = str(entry.get("text") or "")
        return StructuredOutput(kind="per_page", pages=pages)

    text_entries = _entries(raw, "text_list")
    if text_entries:
        text = "\n\n".join(str(e.get("text") or "") for e in text_entries)
        return StructuredOutput(kind="flat", pages={1: text}, text=text)

    return StructuredOutput(kind="absent")
