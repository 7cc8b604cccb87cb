"""Configuration and environment settings"""
from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine configuration, read from ROI_* environment variables or .env"""

    # Workbook asset (http(s) URL, file:// URL or local path)
    WORKBOOK_URL: str = "roi_model.xlsx"
    HTTP_TIMEOUT: float = 30.0  # seconds

    LOG_LEVEL: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="ROI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
