from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields from existing .env
    )

    # Application
    app_name: str = "Mattelevizion Reader"
    debug: bool = False
    log_level: str = "INFO"
    logs_dir: Path = Path("logs")

    # Ghost Content API
    ghost_url: str = Field(
        default="https://your-ghost-site.com",
        validation_alias=AliasChoices("ghost_url", "expo_public_ghost_url"),
    )
    ghost_content_api_key: str = Field(
        default="",
        validation_alias=AliasChoices(
            "ghost_content_api_key", "expo_public_ghost_content_api_key"
        ),
    )
    ghost_api_version: str = "v6.0"

    # Deep links
    app_scheme: str = "mattelevizion"

    # Push token store (Supabase)
    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_url", "expo_public_supabase_url"),
    )
    supabase_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices("supabase_anon_key", "expo_public_supabase_anon_key"),
    )
    push_project_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("push_project_id", "expo_public_project_id"),
    )

    # HTTP client
    http_timeout_seconds: float = 15.0

    @field_validator("ghost_url", "ghost_content_api_key", "supabase_url", "supabase_anon_key")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
