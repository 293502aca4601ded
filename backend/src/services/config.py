"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_DB_PATH = PROJECT_ROOT / "data" / "chat.db"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    jwt_secret_key: Optional[str] = Field(
        default=None,
        description="HMAC secret for JWT signing (required for JWT auth)",
    )
    enable_local_mode: bool = Field(
        default=True,
        description="Accept the static local-dev token when running locally",
    )
    local_dev_token: Optional[str] = Field(
        default="local-dev-token",
        description="Static token accepted in local mode for development",
    )
    database_path: Path = Field(default=DEFAULT_DB_PATH, description="SQLite database file")
    search_default_limit: int = Field(25, ge=1, le=50, description="Page size when none is requested")
    search_max_limit: int = Field(50, ge=1, le=50, description="Upper bound for any page size, never above 50")
    search_case_sensitive: bool = Field(
        default=False,
        description="Match message content case-sensitively (default: ASCII case-insensitive)",
    )
    uploads_url_prefix: str = Field("/uploads", description="URL prefix for stored attachments")
    cors_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    seed_demo_data: bool = Field(default=True, description="Seed a demo server on startup")
    log_level: str = Field("INFO")

    @field_validator("database_path", mode="before")
    @classmethod
    def _normalize_db_path(cls, value: str | Path | None) -> Path:
        if value is None or value == "":
            return DEFAULT_DB_PATH
        return Path(value).expanduser().resolve()

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def _ensure_secret(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned:
            raise ValueError(
                "JWT_SECRET_KEY cannot be empty; unset the variable to disable JWT auth in local mode"
            )
        if len(cleaned) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return cleaned

    @field_validator("uploads_url_prefix")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def _check_limits(self) -> "AppConfig":
        if self.search_default_limit > self.search_max_limit:
            raise ValueError("SEARCH_DEFAULT_LIMIT cannot exceed SEARCH_MAX_LIMIT")
        return self


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


def _read_flag(key: str, default: str) -> bool:
    return (_read_env(key, default) or default).lower() not in {"0", "false", "no"}


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    cors = _read_env("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000") or ""

    config = AppConfig(
        jwt_secret_key=_read_env("JWT_SECRET_KEY"),
        enable_local_mode=_read_flag("ENABLE_LOCAL_MODE", "true"),
        local_dev_token=_read_env("LOCAL_DEV_TOKEN", "local-dev-token"),
        database_path=_read_env("DATABASE_PATH", str(DEFAULT_DB_PATH)),
        search_default_limit=int(_read_env("SEARCH_DEFAULT_LIMIT", "25")),
        search_max_limit=int(_read_env("SEARCH_MAX_LIMIT", "50")),
        search_case_sensitive=_read_flag("SEARCH_CASE_SENSITIVE", "false"),
        uploads_url_prefix=_read_env("UPLOADS_URL_PREFIX", "/uploads"),
        cors_origins=[origin.strip() for origin in cors.split(",") if origin.strip()],
        seed_demo_data=_read_flag("SEED_DEMO_DATA", "true"),
        log_level=(_read_env("LOG_LEVEL", "INFO") or "INFO").upper(),
    )
    # Ensure the database directory exists for downstream services.
    config.database_path.parent.mkdir(parents=True, exist_ok=True)
    return config


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_DB_PATH"]
