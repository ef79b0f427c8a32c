from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class DiffAnalyzeRequest(BaseModel):
    work_id: Optional[str] = None
    page_no: Optional[int] = None


class PageDiffOut(BaseModel):
    page_no: int
    diff_text: str
    details: str


class DiffAnalyzeResponse(BaseModel):
    summary: Any = None
    page_diffs: list[PageDiffOut]


class WorkIdInfoResponse(BaseModel):
    workId: str
    fileName: Optional[str] = None
    hasFile: bool
    fileUrl: Optional[str] = None


class FewshotPage(BaseModel):
    index: int
    url: str
    thumbUrl: str
    path: str


class FewshotPagesResponse(BaseModel):
    pages: list[FewshotPage]


class DiffItem(BaseModel):
    page_no: int = 0
    diff_text: str = ""


class GenerateJsonlRequest(BaseModel):
    work_id: Optional[str] = None
    samples: int = 3
    diffs: list[DiffItem] = Field(default_factory=list)
    prompt: Optional[str] = None


class GenerateJsonlResponse(BaseModel):
    jsonl: str


class DefaultPromptResponse(BaseModel):
    system_prompt: str
    user_prompt: str
