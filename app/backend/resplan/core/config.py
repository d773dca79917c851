"""Application configuration."""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Resource Dashboard Backend"
    app_env: str = "development"
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Remote tier is enabled only when both values are present.
    remote_database_url: str | None = None
    remote_access_key: str | None = None
    remote_create_schema: bool = False
    remote_max_workers: int = Field(default=2, ge=1)

    local_cache_dir: Path = Path(".cache")
    local_cache_slot: str = "dashboard_resources"

    bootstrap_seed: int | None = None
    top_projects_limit: int = Field(default=5, ge=1)

    # Keep .env support for comma-separated values (non-JSON).
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("remote_database_url", "remote_access_key", mode="before")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def remote_configured(self) -> bool:
        return bool(self.remote_database_url and self.remote_access_key)

    @property
    def local_cache_path(self) -> Path:
        return self.local_cache_dir / f"{self.local_cache_slot}.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""

    return Settings()
