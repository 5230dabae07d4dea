from functools import lru_cache
from pathlib import Path
from typing import List
import logging

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    env: str = Field("development", alias="ENV")
    api_prefix: str = Field("/api", alias="API_PREFIX")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    allowed_origins_raw: str | None = Field(None, alias="ALLOWED_ORIGINS")

    # Database
    database_url: str = Field("sqlite:///../data/promptdesk.db", alias="DATABASE_URL")

    # Read-only template catalog; unset means the file bundled with the package
    templates_path: str | None = Field(None, alias="TEMPLATES_PATH")

    # Single implicit owner for every saved prompt (no multi-user isolation)
    default_user_id: str = Field("default", alias="DEFAULT_USER_ID")

    @field_validator("log_level", mode="before")
    @classmethod
    def _validate_log_level(cls, v: str | None) -> str:
        val = (v or "INFO").strip().upper()
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        if val not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(valid)}; got: {v!r}")
        return val

    @field_validator("default_user_id")
    @classmethod
    def _validate_default_user_id(cls, v: str) -> str:
        val = (v or "").strip()
        if not val:
            raise ValueError("DEFAULT_USER_ID must not be empty")
        return val

    @property
    def allowed_origins(self) -> List[str]:
        if self.allowed_origins_raw:
            return [item.strip() for item in self.allowed_origins_raw.split(",") if item.strip()]
        return ["http://localhost:3000"]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()


def warn_development_defaults() -> None:
    """Log the settings that only make sense on a developer machine."""
    log = logging.getLogger("promptdesk.core.config")
    env = (settings.env or "").strip().lower()
    if env in {"dev", "development", "local"}:
        return
    if "*" in settings.allowed_origins:
        log.warning("ALLOWED_ORIGINS contains '*' outside development.")
    if settings.is_sqlite:
        log.warning("Using SQLite storage outside development: %s", settings.database_url)


def resolve_project_path(p: str) -> str:
    """Resolve ``p`` to an absolute path relative to the backend directory when needed.

    - Absolute paths are returned unchanged.
    - Relative paths are anchored on the backend directory (parents[3] from this file).
    """
    raw = Path(p)
    if raw.is_absolute():
        return str(raw)
    base = Path(__file__).resolve().parents[3]  # …/backend
    return str((base / raw).resolve())
