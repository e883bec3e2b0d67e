"""Configuration objects for the listings watcher."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MAX_RETENTION_DAYS = 3650


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        populate_by_name=True,
        extra="ignore",
    )

    snapshot_file: Path = Field(Path("cex-listings.json"), alias="SNAPSHOT_FILE", description="Current symbols per exchange")
    listings_file: Path = Field(Path("new-listings.json"), alias="LISTINGS_FILE", description="Recently detected listings")
    status_file: Path = Field(Path("status.json"), alias="STATUS_FILE", description="Outcome of the last run")
    log_dir: Path = Field(Path("logs"), alias="LOG_DIR", description="Directory for daily update logs")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    retention_days: int = Field(30, alias="RETENTION_DAYS", description="How long detected listings are kept")
    request_timeout: int = Field(20, alias="API_TIMEOUT_SEC", description="HTTP request timeout in seconds")
    seed_empty_snapshots: bool = Field(
        False,
        alias="SEED_EMPTY_SNAPSHOTS",
        description="Store the first snapshot of an exchange without reporting listings",
    )

    http_proxy: Optional[str] = Field(None, alias="HTTPS_PROXY")

    @field_validator("retention_days", "request_timeout")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Interval values must be positive")
        return value

    @field_validator("retention_days")
    @classmethod
    def _bounded_retention(cls, value: int) -> int:
        if value > MAX_RETENTION_DAYS:
            raise ValueError(f"Retention cannot exceed {MAX_RETENTION_DAYS} days")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()
