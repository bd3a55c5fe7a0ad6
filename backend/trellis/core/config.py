"""Application configuration powered by Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Strongly typed application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: Literal["dev", "staging", "prod"] = Field(default="dev")
    project_name: str = Field(default="Trellis Planning API")
    version: str = Field(default="0.1.0")
    log_level: str = Field(default="INFO")

    database_url: str = Field(default="sqlite+aiosqlite:///./data/trellis.db")
    auto_create_schema: bool = Field(default=True)

    storage_root: str = Field(default="./data/storage")
    financial_docs_bucket: str = Field(default="financial-documents")
    customer_insights_bucket: str = Field(default="customer-insights")

    signing_secret: str = Field(default="change-me", min_length=1)
    signed_url_ttl_seconds: int = Field(default=60 * 60, ge=1, le=7 * 24 * 60 * 60)
    public_base_url: str = Field(default="http://localhost:8000")

    cors_allowed_origins: list[str] = Field(default_factory=list)


@lru_cache
def get_settings() -> AppSettings:
    """Provide a cached singleton settings instance."""

    return AppSettings()
