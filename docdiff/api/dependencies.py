"""FastAPI dependencies: caller identity, access checks and port providers.

Port providers are plain functions so tests can swap them through
``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Depends, Header

from docdiff.application.services.factories import (
    build_bootstrapper,
    build_rasterizer,
    build_registry,
    build_structuring_client,
    build_text_extractor,
    build_vision_client,
)
from docdiff.application.usecases.analyze_diff import DiffPorts
from docdiff.domain.ports.access_port import AccessPort
from docdiff.domain.ports.vision_port import VisionPort
from docdiff.domain.ports.work_unit_port import WorkUnitPort
from docdiff.infrastructure.storage.work_unit_registry import JsonWorkUnitRegistry
from docdiff.observability.errors import to_http_error


def get_principal(x_remote_user: str | None = Header(default=None)) -> str:
    principal = (x_remote_user or "").strip()
    if not principal:
        raise to_http_error("UNAUTHENTICATED")
    return principal


def get_registry() -> JsonWorkUnitRegistry:
    return build_registry()


def get_work_units(registry: JsonWorkUnitRegistry = Depends(get_registry)) -> WorkUnitPort:
    return registry


def get_access(registry: JsonWorkUnitRegistry = Depends(get_registry)) -> AccessPort:
    return registry


def get_vision() -> VisionPort:
    return build_vision_client()


def get_diff_ports(
    work_units: WorkUnitPort = Depends(get_work_units),
    vision: VisionPort = Depends(get_vision),
) -> DiffPorts:
    return DiffPorts(
        work_units=work_units,
        text=build_text_extractor(),
        structured=build_structuring_client(),
        vision=vision,
        rasterizer=build_rasterizer(),
        bootstrapper=build_bootstrapper(),
    )


async def require_access(access: AccessPort, principal: str, work_id: str) -> None:
    if not await access.can_access(principal, work_id):
        raise to_http_error("ACCESS_DENIED")
