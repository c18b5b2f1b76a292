"""
Trade estimator configuration settings.

Manages application settings via environment variables with sensible defaults.
"""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ESTIMATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Trade Estimator"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # Pricing fallbacks (used when the contractor profile has no value)
    default_hourly_rate: float = 75.0
    default_waste_factor: float = 0.12
    default_material_markup_percent: float = 15.0

    # Estimate documents
    estimate_valid_days: int = 30

    # CORS
    cors_origins: List[str] = [
        "http://localhost:3000",  # Next.js dev server
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite dev server
        "http://127.0.0.1:5173",
    ]


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings
