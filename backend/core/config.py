from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic.aliases import AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=BACKEND_DIR / ".env", env_file_encoding="utf-8")

    database_url: str

    # Runtime
    environment: str = Field(default="development", validation_alias=AliasChoices("environment", "ENVIRONMENT"))
    frontend_origin: str = Field(
        default="http://localhost:5173",
        validation_alias=AliasChoices("frontend_origin", "FRONTEND_ORIGIN"),
    )

    # Data scoping: requests without an X-School-Id header fall back to this school.
    default_school_id: str = Field(
        default="default",
        validation_alias=AliasChoices("default_school_id", "DEFAULT_SCHOOL_ID", "SCHOOL_ID"),
    )

    # Seat records are cleared and written in chunks of this size.
    seating_write_batch_size: int = Field(
        default=450,
        ge=1,
        le=500,
        validation_alias=AliasChoices("seating_write_batch_size", "SEATING_WRITE_BATCH_SIZE"),
    )

    # Logging. Unset level means DEBUG outside production, INFO in production.
    log_level: str | None = Field(default=None, validation_alias=AliasChoices("log_level", "LOG_LEVEL"))
    log_dir: str | None = Field(default=None, validation_alias=AliasChoices("log_dir", "LOG_DIR"))
    # Keep per-seat buffer/swap decisions at DEBUG even when the app logs at INFO.
    seating_trace: bool = Field(default=False, validation_alias=AliasChoices("seating_trace", "SEATING_TRACE"))

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        v = v.strip().upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL {v!r}")
        return v

    @field_validator("frontend_origin")
    @classmethod
    def _normalize_frontend_origin(cls, v: str) -> str:
        # Starlette CORS expects the Origin to match exactly (no trailing slash).
        return v.strip().rstrip("/")

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, v: str) -> str:
        return (v or "development").strip().lower()

    @field_validator("default_school_id")
    @classmethod
    def _normalize_default_school_id(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("DEFAULT_SCHOOL_ID must not be empty")
        return v


settings = Settings()
