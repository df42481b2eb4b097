"""Application configuration utilities."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./sessionbook.db", alias="DATABASE_URL"
    )
    aws_region: str = Field(default="eu-central-1", alias="AWS_REGION")
    aws_s3_bucket: str = Field(default="local", alias="AWS_S3_BUCKET")
    aws_access_key_id: str | None = Field(
        default=None, alias="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: str | None = Field(
        default=None, alias="AWS_SECRET_ACCESS_KEY"
    )
    local_storage_path: str = Field(
        default="/tmp/sessionbook", alias="LOCAL_STORAGE_PATH"
    )
    invoice_number_scope: Literal["year", "month"] = Field(
        default="year", alias="INVOICE_NUMBER_SCOPE"
    )
    invoice_number_width: int = Field(default=3, ge=1, alias="INVOICE_NUMBER_WIDTH")
    invoice_due_days: int = Field(default=30, ge=0, alias="INVOICE_DUE_DAYS")
    invoice_max_range_days: int = Field(
        default=365, ge=0, alias="INVOICE_MAX_RANGE_DAYS"
    )
    default_language: Literal["en", "de"] = Field(
        default="en", alias="DEFAULT_LANGUAGE"
    )
    currency_symbol: str = Field(default="€", alias="CURRENCY_SYMBOL")
    schedule_advance_days: int = Field(
        default=7, ge=0, alias="SCHEDULE_ADVANCE_DAYS"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings"]
