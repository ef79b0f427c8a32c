from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from docdiff.api.v1.routes_diff import router as diff_router
from docdiff.api.v1.routes_fewshot import router as fewshot_router
from docdiff.api.v1.routes_health import router as health_router
from docdiff.api.v1.routes_storage import router as storage_router
from docdiff.api.v1.routes_synthetic import router as synthetic_router
from docdiff.core.config import get_settings
from docdiff.core.logging import RequestIdMiddleware, configure_logging, get_logger
from docdiff.observability.metrics import MetricsMiddleware
from docdiff.observability.metrics import router as metrics_router

# Initialize settings and logging
settings = get_settings()
configure_logging(settings.LOG_LEVEL, json_format=settings.LOG_JSON)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = get_logger(__name__)
    logger.info(
        "service_startup",
        extra={
            "env": settings.ENV,
            "log_level": settings.LOG_LEVEL,
            "path": str(settings.ARTIFACT_ROOT),
        },
    )
    try:
        yield
    finally:
        logger.info("service_shutdown")


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(MetricsMiddleware)

# Routers
app.include_router(health_router)
app.include_router(diff_router)
app.include_router(storage_router)
app.include_router(fewshot_router)
app.include_router(synthetic_router)
app.include_router(metrics_router)
