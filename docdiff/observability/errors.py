from __future__ import annotations

from typing import Any

from fastapi import HTTPException


ERROR_REGISTRY: dict[str, dict[str, Any]] = {
    "WORK_ID_REQUIRED": {
        "status": 400,
        "message": "work_id is required",
    },
    "INVALID_ARGUMENT": {
        "status": 400,
        "message": "Invalid argument",
    },
    "UNAUTHENTICATED": {
        "status": 401,
        "message": "Authentication required",
    },
    "ACCESS_DENIED": {
        "status": 403,
        "message": "No access to this work_id",
    },
    "SOURCE_UNAVAILABLE": {
        "status": 404,
        "message": "Stored original PDF not found",
    },
    "FILE_NOT_FOUND": {
        "status": 404,
        "message": "File not found",
    },
    "GENERATION_FAILED": {
        "status": 502,
        "message": "Text generation failed",
    },
    "INTERNAL_PROCESSING_ERROR": {
        "status": 500,
        "message": "Internal processing error",
    },
}


def to_http_error(code: str, *, message: str | None = None, status: int | None = None) -> HTTPException:
    meta = ERROR_REGISTRY.get(code, {"status": 500, "message": code})
    status_code = int(status or meta.get("status", 500))
    detail_msg = message or str(meta.get("message", code))
    return HTTPException(status_code=status_code, detail={"code": code, "message": detail_msg})
