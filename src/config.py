"""Configuration management for the application."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = Field(default="sqlite:///./formulation.db")

    # Key-value storage
    storage_backend: Literal["sql", "redis"] = Field(default="sql")
    redis_url: str = Field(default="redis://localhost:6379/0")
    storage_key_prefix: str = Field(default="mms_")
    # When false, storage failures are logged and swallowed (reads return [])
    strict_storage: bool = Field(default=True)

    # Mass balance
    balance_tolerance: float = Field(default=0.01, gt=0)
    balance_relative_tolerance: float | None = Field(default=None, gt=0, lt=1)

    # Seed the sample ingredients on startup when the collection is empty
    seed_sample_data: bool = Field(default=False)

    # API
    environment: str = Field(default="development")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has durable settings."""
        if self.environment == "production":
            if self.storage_backend == "sql" and self.database_url.startswith("sqlite"):
                raise ValueError("DATABASE_URL should not use SQLite in production")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
