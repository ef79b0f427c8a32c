from __future__ import annotations

from pathlib import Path

from docdiff.core.config import Settings, get_settings
from docdiff.infrastructure.clients.structuring_http import StructuringHttpClient
from docdiff.infrastructure.clients.vision_http import VisionHttpClient
from docdiff.infrastructure.pdf.pypdf_text import PypdfPageTextExtractor
from docdiff.infrastructure.rendering.bootstrap import RenderingBootstrapper
from docdiff.infrastructure.rendering.subprocess_rasterizer import SubprocessRasterizer
from docdiff.infrastructure.storage.work_unit_registry import JsonWorkUnitRegistry


def _under_base(s: Settings, path: Path) -> Path:
    return path if path.is_absolute() else Path(s.APP_BASE_DIR) / path


def build_registry() -> JsonWorkUnitRegistry:
    s = get_settings()
    return JsonWorkUnitRegistry(_under_base(s, Path(s.WORK_UNITS_FILE)), admin_principals=s.ADMIN_PRINCIPALS)


def build_text_extractor() -> PypdfPageTextExtractor:
    return PypdfPageTextExtractor()


def build_structuring_client() -> StructuringHttpClient:
    s = get_settings()
    return StructuringHttpClient(
        base_url=s.STRUCTURING_BASE_URL,
        user=s.STRUCTURING_USER,
        password=s.STRUCTURING_PASSWORD.get_secret_value(),
        timeout_seconds=s.STRUCTURING_TIMEOUT_SECONDS,
    )


def build_vision_client() -> VisionHttpClient:
    s = get_settings()
    return VisionHttpClient(
        base_url=s.VISION_BASE_URL,
        api_key=s.VISION_API_KEY.get_secret_value(),
        model=s.VISION_MODEL,
        max_tokens=s.VISION_MAX_TOKENS,
        temperature=s.VISION_TEMPERATURE,
        timeout_seconds=s.VISION_TIMEOUT_SECONDS,
        verify_ssl=s.VISION_VERIFY_SSL,
    )


def build_rasterizer() -> SubprocessRasterizer:
    s = get_settings()
    return SubprocessRasterizer(
        s.PYTHON_BIN,
        Path(s.RENDER_SCRIPT),
        dpi=s.RENDER_DPI,
        fmt=s.RENDER_FORMAT,
        timeout_seconds=s.RENDER_TIMEOUT_SECONDS,
    )


def build_bootstrapper() -> RenderingBootstrapper | None:
    s = get_settings()
    if not s.BOOTSTRAP_ENABLED:
        return None
    return RenderingBootstrapper(
        s.PYTHON_BIN,
        os_release_path=Path(s.OS_RELEASE_PATH),
        timeout_seconds=s.BOOTSTRAP_TIMEOUT_SECONDS,
    )
