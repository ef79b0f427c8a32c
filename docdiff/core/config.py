from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_base_dir() -> Path:
    # <repo>/docdiff/core/config.py -> <repo>
    return Path(__file__).resolve().parents[2]


def _default_render_script() -> Path:
    return (Path(__file__).resolve().parents[1] / "tools" / "render_pages.py").resolve()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DOCDIFF_", env_file=".env", extra="ignore")

    APP_NAME: str = Field(default="docdiff-service")
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")
    LOG_JSON: bool = Field(default=False)

    # Installation directory; the stored-file resolver also probes its parent.
    APP_BASE_DIR: Path = Field(default_factory=_default_base_dir)
    WORK_UNITS_FILE: Path = Field(default=Path("storage/work_units.json"))
    ADMIN_PRINCIPALS: list[str] = Field(default_factory=list)
    PUBLIC_PATH_BASE: str = Field(default="")

    # Rasterization
    ARTIFACT_ROOT: Path = Field(default=Path("/var/lib/docdiff/tmp"))
    PYTHON_BIN: str = Field(default="python3")
    RENDER_SCRIPT: Path = Field(default_factory=_default_render_script)
    RENDER_DPI: int = Field(default=200)
    RENDER_FORMAT: str = Field(default="png")
    RENDER_TIMEOUT_SECONDS: float = Field(default=60.0)
    BOOTSTRAP_ENABLED: bool = Field(default=True)
    BOOTSTRAP_TIMEOUT_SECONDS: float = Field(default=300.0)
    OS_RELEASE_PATH: Path = Field(default=Path("/etc/os-release"))

    # Structuring service
    STRUCTURING_BASE_URL: str | None = Field(default=None)
    STRUCTURING_USER: str = Field(default="")
    STRUCTURING_PASSWORD: SecretStr = Field(default=SecretStr(""))
    STRUCTURING_TIMEOUT_SECONDS: int = Field(default=30)

    # Vision / text generation
    VISION_BASE_URL: str | None = Field(default=None)
    VISION_API_KEY: SecretStr = Field(default=SecretStr(""))
    VISION_MODEL: str = Field(default="gpt-4o")
    VISION_MAX_TOKENS: int = Field(default=2000)
    VISION_TEMPERATURE: float = Field(default=0.0)
    VISION_TIMEOUT_SECONDS: int = Field(default=120)
    VISION_VERIFY_SSL: bool = Field(default=True)

    def shared_artifact_roots(self, cwd: Path | None = None) -> list[Path]:
        """Long-lived directories that may already hold page images, in priority order."""
        here = Path(cwd) if cwd is not None else Path.cwd()
        roots = [
            Path(self.ARTIFACT_ROOT),
            here / "storage" / "images",
            here / "storage" / "tmp",
            Path(self.APP_BASE_DIR) / "storage" / "images",
            Path(self.APP_BASE_DIR) / "storage" / "tmp",
        ]
        unique: list[Path] = []
        for r in roots:
            if r not in unique:
                unique.append(r)
        return unique


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
