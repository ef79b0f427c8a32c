from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse

from docdiff.api.dependencies import get_access, get_principal, get_work_units, require_access
from docdiff.core.config import get_settings
from docdiff.core.logging import get_logger
from docdiff.domain.pipeline.errors import PathNotFoundError
from docdiff.domain.pipeline.stages.resolve import resolve_stored_path
from docdiff.domain.ports.access_port import AccessPort
from docdiff.domain.ports.work_unit_port import WorkUnitPort
from docdiff.models.schemas import WorkIdInfoResponse
from docdiff.observability.errors import to_http_error

router = APIRouter(prefix="/v1/storage", tags=["storage"])


def content_disposition_inline(file_name: str) -> str:
    """Inline disposition with an ASCII fallback and an RFC 5987 UTF-8 name."""
    return f"inline; filename=\"file.pdf\"; filename*=UTF-8''{quote(file_name, safe='')}"


def external_base_url(request: Request) -> str:
    """Scheme, host and prefix as seen by the caller, honouring proxy headers."""
    h = request.headers
    scheme = h.get("x-forwarded-proto") or request.url.scheme
    host = h.get("x-forwarded-host") or request.url.hostname or "localhost"
    if ":" not in host:
        port = h.get("x-forwarded-port") or (str(request.url.port) if request.url.port else "")
        default = "443" if scheme.lower() == "https" else "80"
        if port and port != default:
            host = f"{host}:{port}"
    prefix = h.get("x-forwarded-prefix") or get_settings().PUBLIC_PATH_BASE or request.scope.get("root_path", "")
    return f"{scheme}://{host}{prefix.rstrip('/')}"


@router.get("/original")
async def get_original(
    work_id: str = Query(default=""),
    principal: str = Depends(get_principal),
    access: AccessPort = Depends(get_access),
    work_units: WorkUnitPort = Depends(get_work_units),
):
    logger = get_logger(__name__)
    work_id = work_id.strip()
    if not work_id:
        raise to_http_error("WORK_ID_REQUIRED")
    await require_access(access, principal, work_id)

    unit = await work_units.get_work_unit(work_id)
    if unit is None or not unit.saved_relative_path:
        raise to_http_error("SOURCE_UNAVAILABLE")
    try:
        path = resolve_stored_path(unit.saved_relative_path, base_dir=Path(get_settings().APP_BASE_DIR))
    except PathNotFoundError as e:
        logger.warning("original_not_found", extra={"work_id": work_id, "error": str(e)})
        raise to_http_error("FILE_NOT_FOUND")

    file_name = unit.original_file_name or path.name
    logger.info("original_served", extra={"work_id": work_id, "principal": principal, "path": str(path)})
    return FileResponse(
        path,
        media_type="application/pdf",
        headers={"Content-Disposition": content_disposition_inline(file_name)},
    )


@router.get("/workid-info", response_model=WorkIdInfoResponse)
async def workid_info(
    request: Request,
    work_id: str = Query(default=""),
    principal: str = Depends(get_principal),
    access: AccessPort = Depends(get_access),
    work_units: WorkUnitPort = Depends(get_work_units),
):
    work_id = work_id.strip()
    if not work_id:
        raise to_http_error("WORK_ID_REQUIRED")
    await require_access(access, principal, work_id)

    unit = await work_units.get_work_unit(work_id)
    has_file = unit is not None and bool(unit.saved_relative_path)
    file_url = None
    if has_file:
        file_url = f"{external_base_url(request)}/v1/storage/original?work_id={quote(work_id, safe='')}"
    return WorkIdInfoResponse(
        workId=work_id,
        fileName=unit.original_file_name if unit else None,
        hasFile=has_file,
        fileUrl=file_url,
    )
