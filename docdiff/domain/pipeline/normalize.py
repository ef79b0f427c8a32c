from __future__ import annotations

import re

from docdiff.domain.pipeline.constants import DIAGRAM_FENCE_LANGUAGES

_DIAGRAM_FENCE_RE = re.compile(
    r"```[ \t]*(?:" + "|".join(DIAGRAM_FENCE_LANGUAGES) + r")\b[\s\S]*?```[ \t]*(?:\n|$)",
    re.IGNORECASE,
)
_SPACE_RUN_RE = re.compile("[\t\u00a0]+")


def normalize_text(text: str | None) -> str:
    """Normalize page text so both sources compare on equal terms.

    - CRLF / CR -> LF
    - fenced diagram blocks (```mermaid ... ```) removed with their line break
    - runs of tabs / non-breaking spaces folded to one space
    - surrounding whitespace trimmed
    """
    if not text:
        return ""
    t = text.replace("\r\n", "\n").replace("\r", "\n")
    t = _DIAGRAM_FENCE_RE.sub("", t)
    t = _SPACE_RUN_RE.sub(" ", t)
    return t.strip()
