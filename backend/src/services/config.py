"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:1420"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(..., description="Directory holding projects.json and the layout database")
    database_path: Optional[Path] = Field(
        default=None, description="SQLite file for the layout cache (defaults to <data_dir>/graph.db)"
    )
    content_mount_root: str = Field(
        default="/Game", description="Mount point stripped from asset paths for folder grouping"
    )
    search_result_limit: int = Field(default=8, ge=1, le=100)
    layout_alpha_threshold: float = Field(
        default=0.01,
        gt=0.0,
        lt=1.0,
        description="Oracle energy below which the layout counts as converged",
    )
    default_focus_hops: int = Field(default=1, ge=0)
    cors_origins: List[str] = Field(default_factory=list)

    @field_validator("data_dir", mode="before")
    @classmethod
    def _normalize_data_dir(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            raise ValueError("CODEX_DATA_DIR is required")
        path = value if isinstance(value, Path) else Path(value)
        return path.expanduser().resolve()

    @field_validator("database_path", mode="before")
    @classmethod
    def _normalize_database_path(cls, value: str | Path | None) -> Optional[Path]:
        if value is None or value == "":
            return None
        path = value if isinstance(value, Path) else Path(value)
        return path.expanduser().resolve()

    @field_validator("content_mount_root")
    @classmethod
    def _ensure_rooted(cls, value: str) -> str:
        cleaned = value.strip().rstrip("/")
        if not cleaned.startswith("/"):
            raise ValueError("CONTENT_MOUNT_ROOT must start with '/'")
        return cleaned

    @property
    def layout_db_path(self) -> Path:
        return self.database_path or self.data_dir / "graph.db"

    @property
    def projects_file(self) -> Path:
        return self.data_dir / "projects.json"


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    load_dotenv()
    cors_raw = _read_env("CORS_ORIGINS", DEFAULT_CORS_ORIGINS) or ""

    config = AppConfig(
        data_dir=_read_env("CODEX_DATA_DIR", str(DEFAULT_DATA_DIR)),
        database_path=_read_env("CODEX_DB_PATH"),
        content_mount_root=_read_env("CONTENT_MOUNT_ROOT", "/Game"),
        search_result_limit=int(_read_env("GRAPH_SEARCH_LIMIT", "8")),
        layout_alpha_threshold=float(_read_env("LAYOUT_ALPHA_THRESHOLD", "0.01")),
        default_focus_hops=int(_read_env("DEFAULT_FOCUS_HOPS", "1")),
        cors_origins=[origin.strip() for origin in cors_raw.split(",") if origin.strip()],
    )
    # Ensure the data directory exists for downstream services.
    config.data_dir.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_DATA_DIR"]
