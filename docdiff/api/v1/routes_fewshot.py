from __future__ import annotations

from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse

from docdiff.api.dependencies import get_access, get_principal, require_access
from docdiff.application.services.gallery import list_work_images, resolve_served_image
from docdiff.core.config import get_settings
from docdiff.core.logging import get_logger
from docdiff.domain.ports.access_port import AccessPort
from docdiff.models.schemas import FewshotPage, FewshotPagesResponse
from docdiff.observability.errors import to_http_error

router = APIRouter(prefix="/v1/fewshot", tags=["fewshot"])

_MEDIA_TYPES = {".png": "image/png", ".jpg": "image/jpeg", ".jpeg": "image/jpeg"}


@router.get("/pages", response_model=FewshotPagesResponse)
async def fewshot_pages(
    request: Request,
    work_id: str = Query(default=""),
    principal: str = Depends(get_principal),
    access: AccessPort = Depends(get_access),
):
    logger = get_logger(__name__)
    work_id = work_id.strip()
    if not work_id:
        raise to_http_error("WORK_ID_REQUIRED")
    await require_access(access, principal, work_id)

    images, fallback = list_work_images(work_id, get_settings().shared_artifact_roots())
    prefix = get_settings().PUBLIC_PATH_BASE or request.scope.get("root_path", "")
    pages = []
    for i, p in enumerate(images):
        url = f"{prefix}/v1/fewshot/image?work_id={quote(work_id, safe='')}&path={quote(str(p), safe='')}"
        pages.append(FewshotPage(index=i, url=url, thumbUrl=url, path=str(p)))
    logger.info(
        "fewshot_pages_listed",
        extra={"work_id": work_id, "status": f"{'fallback' if fallback else 'matched'}: {len(pages)}"},
    )
    return FewshotPagesResponse(pages=pages)


@router.get("/image")
async def fewshot_image(
    path: str = Query(default=""),
    principal: str = Depends(get_principal),
):
    served = resolve_served_image(path, get_settings().shared_artifact_roots())
    if served is None:
        raise to_http_error("FILE_NOT_FOUND")
    return FileResponse(served, media_type=_MEDIA_TYPES.get(served.suffix.lower(), "application/octet-stream"))
