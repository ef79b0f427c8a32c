from __future__ import annotations

import pytest

from conftest import FakeVision
from docdiff.application.llm.parsers import strip_code_fences
from docdiff.application.llm.prompts import SYNTHETIC_SYSTEM_PROMPT, build_diffs_joined
from docdiff.application.usecases.synthetic import default_prompts, generate_jsonl


def test_diffs_joined_in_page_order() -> None:
    joined = build_diffs_joined([(1, "second"), (0, "first")])
    assert joined == "[p.1]\nfirst\n\n[p.2]\nsecond"


def test_strip_code_fences() -> None:
    assert strip_code_fences('```jsonl\n{"a": 1}\n{"b": 2}\n```') == '{"a": 1}\n{"b": 2}\n'
    assert strip_code_fences('  {"a": 1}  ') == '{"a": 1}'
    assert strip_code_fences(None) == ""


def test_default_prompts_keep_placeholder() -> None:
    prompts = default_prompts(samples=5)
    assert prompts["system_prompt"] == SYNTHETIC_SYSTEM_PROMPT
    assert "5 JSONL lines" in prompts["user_prompt"]
    assert prompts["user_prompt"].endswith("{{DIFFS}}")
    assert "1 JSONL lines" in default_prompts(samples=0)["user_prompt"]


@pytest.mark.asyncio
async def test_caller_prompt_placeholders_substituted() -> None:
    vision = FakeVision(reply='```\n{"task": "pdf_structuring"}\n```')
    out = await generate_jsonl(
        work_id="w-1",
        diffs=[(0, "missing stamp")],
        vision_port=vision,
        prompt="A: {{DIFFS}} B: {diffs}",
    )
    assert out == '{"task": "pdf_structuring"}\n'
    system, user = vision.text_calls[0]
    assert system == SYNTHETIC_SYSTEM_PROMPT
    assert user == "A: [p.1]\nmissing stamp B: [p.1]\nmissing stamp"


@pytest.mark.asyncio
async def test_default_prompt_used_when_blank() -> None:
    vision = FakeVision(reply="{}")
    await generate_jsonl(work_id="w", diffs=[(2, "x")], vision_port=vision, samples=2, prompt="   ")
    user = vision.text_calls[0][1]
    assert "2 JSONL lines" in user
    assert user.endswith("[p.3]\nx")
