from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from docdiff.api.dependencies import get_access, get_principal, get_vision, require_access
from docdiff.application.usecases.synthetic import default_prompts, generate_jsonl
from docdiff.core.logging import get_logger
from docdiff.domain.ports.access_port import AccessPort
from docdiff.domain.ports.vision_port import VisionPort
from docdiff.models.schemas import DefaultPromptResponse, GenerateJsonlRequest, GenerateJsonlResponse
from docdiff.observability.errors import to_http_error

router = APIRouter(prefix="/v1/synthetic", tags=["synthetic"])


@router.post("/generate-jsonl", response_model=GenerateJsonlResponse)
async def generate(
    body: GenerateJsonlRequest,
    principal: str = Depends(get_principal),
    access: AccessPort = Depends(get_access),
    vision: VisionPort = Depends(get_vision),
):
    logger = get_logger(__name__)
    work_id = (body.work_id or "").strip()
    if not work_id:
        raise to_http_error("WORK_ID_REQUIRED")
    await require_access(access, principal, work_id)

    try:
        jsonl = await generate_jsonl(
            work_id=work_id,
            diffs=[(d.page_no, d.diff_text) for d in body.diffs],
            vision_port=vision,
            samples=body.samples,
            prompt=body.prompt,
        )
    except Exception as e:
        logger.error("synthetic_generation_failed", extra={"work_id": work_id, "error": str(e)})
        raise to_http_error("GENERATION_FAILED")
    return GenerateJsonlResponse(jsonl=jsonl)


@router.get("/default-prompt", response_model=DefaultPromptResponse)
async def default_prompt(samples: int = Query(default=3)):
    return DefaultPromptResponse(**default_prompts(samples))
