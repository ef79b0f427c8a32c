from __future__ import annotations


def strip_code_fences(content: str | None) -> str:
    """Drop a leading fence line and any remaining fence markers from generated JSONL."""
    text = (content or "").strip()
    if text.startswith("```"):
        idx = text.find("\n")
        if idx > 0:
            text = text[idx + 1 :]
        text = text.replace("```", "")
    return text
