from fastapi import APIRouter, Request

from docdiff.core.config import get_settings
from docdiff.core.logging import get_logger

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Liveness check: process is up."""
    settings = get_settings()
    logger = get_logger(__name__)
    logger.info("health", extra={"path": str(request.url.path)})
    return {"status": "ok", "service": settings.APP_NAME}


@router.get("/ready")
async def ready(request: Request):
    """Readiness check: the work-unit registry is reachable when configured."""
    settings = get_settings()
    logger = get_logger(__name__)
    registry = settings.WORK_UNITS_FILE
    if not registry.is_absolute():
        registry = settings.APP_BASE_DIR / registry
    logger.info("ready", extra={"path": str(request.url.path)})
    return {"status": "ok", "service": settings.APP_NAME, "work_units_file": registry.is_file()}
