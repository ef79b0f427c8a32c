from __future__ import annotations

from fastapi import APIRouter, Depends

from docdiff.api.dependencies import get_access, get_diff_ports, get_principal, require_access
from docdiff.application.usecases.analyze_diff import DiffPorts, analyze_diff
from docdiff.core.logging import get_logger
from docdiff.domain.pipeline.errors import InvalidArgumentError, SourceUnavailableError
from docdiff.domain.ports.access_port import AccessPort
from docdiff.models.schemas import DiffAnalyzeRequest, DiffAnalyzeResponse, PageDiffOut
from docdiff.observability.errors import to_http_error

router = APIRouter(prefix="/v1/ocr", tags=["ocr"])


@router.post("/diff-analyze", response_model=DiffAnalyzeResponse)
async def diff_analyze(
    body: DiffAnalyzeRequest,
    principal: str = Depends(get_principal),
    access: AccessPort = Depends(get_access),
    ports: DiffPorts = Depends(get_diff_ports),
):
    logger = get_logger(__name__)
    work_id = (body.work_id or "").strip()
    if not work_id:
        raise to_http_error("WORK_ID_REQUIRED")
    await require_access(access, principal, work_id)

    try:
        result = await analyze_diff(
            work_id=work_id,
            principal=principal,
            ports=ports,
            target_page=body.page_no,
        )
    except InvalidArgumentError as e:
        raise to_http_error("INVALID_ARGUMENT", message=str(e))
    except SourceUnavailableError as e:
        logger.warning("diff_source_unavailable", extra={"work_id": work_id, "error": str(e)})
        raise to_http_error("SOURCE_UNAVAILABLE")
    except Exception as e:
        logger.error("diff_analyze_failed", extra={"work_id": work_id, "error": str(e)})
        raise to_http_error("INTERNAL_PROCESSING_ERROR")

    return DiffAnalyzeResponse(
        summary=result.summary,
        page_diffs=[PageDiffOut(page_no=d.page_no, diff_text=d.diff_text, details=d.details) for d in result.page_diffs],
    )
