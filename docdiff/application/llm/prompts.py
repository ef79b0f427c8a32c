from __future__ import annotations

from typing import Iterable

from docdiff.domain.pipeline.paging import report_index_to_page_number

DIFFS_PLACEHOLDERS = ("{{DIFFS}}", "{diffs}")

SYNTHETIC_SYSTEM_PROMPT = (
    "You are an expert at producing synthetic few-shot training data (JSONL) for RAG document "
    "structuring. Output strict JSONL (one JSON object per line) with no code fences and no commentary."
)


def build_synthetic_user_prompt(samples: int, diffs_block: str = "{{DIFFS}}") -> str:
    n = max(1, samples)
    return (
        "Below are per-page descriptions of differences between a PDF and its structured text. "
        "Use them to write a few-shot dataset of "
        f"{n} JSONL lines that improves recognition and structuring of images and similar content "
        "when documents like this one are structured for a RAG index.\n"
        "- Every JSON line must contain the keys: task, instruction, input_text, target_structured\n"
        "- task is always 'pdf_structuring'\n"
        "- instruction states the task in 1-2 sentences\n"
        "- input_text is a plausible fragment of an unseen document\n"
        "- target_structured is the desired structured output for that fragment\n"
        "- The differences are reference material only; do not invent facts absent from the source document\n"
        "- Output nothing but JSON (no code fences, no notes)\n"
        "\nDifferences:\n\n" + diffs_block
    )


def build_diffs_joined(diffs: Iterable[tuple[int, str]]) -> str:
    """Join (0-based page_no, text) pairs in page order under ``[p.<n>]`` headers."""
    ordered = sorted(diffs, key=lambda d: d[0])
    return "\n\n".join(f"[p.{report_index_to_page_number(no)}]\n{text}" for no, text in ordered)


def substitute_diffs(prompt: str, diffs_joined: str) -> str:
    for placeholder in DIFFS_PLACEHOLDERS:
        prompt = prompt.replace(placeholder, diffs_joined)
    return prompt
