from __future__ import annotations

import time
from typing import Awaitable, Callable

from fastapi import APIRouter, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    labelnames=("endpoint", "method", "status"),
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    labelnames=("endpoint", "method"),
    buckets=(0.05, 0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)
pipeline_duration_seconds = Histogram(
    "pipeline_duration_seconds",
    "End-to-end diff pipeline duration in seconds",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0),
)
pipeline_stage_duration_seconds = Histogram(
    "pipeline_stage_duration_seconds",
    "Pipeline stage duration in seconds",
    labelnames=("stage",),
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0),
)
pages_degraded_total = Counter(
    "pages_degraded_total",
    "Pages reported with the degraded placeholder",
    labelnames=("reason",),
)
rasterizer_invocations_total = Counter(
    "rasterizer_invocations_total",
    "External rasterization attempts",
    labelnames=("status",),
)


class MetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]):
        start = time.perf_counter()
        try:
            response = await call_next(request)
            status = getattr(response, "status_code", 200)
            endpoint = _endpoint_label(request)
            method = request.method
            http_requests_total.labels(endpoint=endpoint, method=method, status=str(status)).inc()
            http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(time.perf_counter() - start)
            return response
        except Exception:
            endpoint = _endpoint_label(request)
            method = request.method
            http_requests_total.labels(endpoint=endpoint, method=method, status="500").inc()
            http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(time.perf_counter() - start)
            raise


def _endpoint_label(request: Request) -> str:
    # Prefer the route template (e.g. /v1/ocr/diff-analyze) over the raw path
    route = request.scope.get("route")
    path = getattr(route, "path", None) or getattr(route, "path_format", None)
    if isinstance(path, str) and path:
        return path
    return request.url.path


def record_pipeline_duration(seconds: float) -> None:
    pipeline_duration_seconds.observe(seconds)


def record_stage_duration(stage: str, seconds: float) -> None:
    pipeline_stage_duration_seconds.labels(stage=stage).observe(seconds)


def inc_page_degraded(reason: str) -> None:
    pages_degraded_total.labels(reason=reason).inc()


def inc_rasterizer_invocation(status: str) -> None:
    rasterizer_invocations_total.labels(status=status).inc()


# Router to expose /metrics
router = APIRouter()


@router.get("/metrics")
async def metrics_endpoint():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
