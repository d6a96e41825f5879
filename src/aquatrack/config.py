"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="AQUATRACK_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "AquaTrack API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level applied at startup.")

    bottle_price: float = Field(default=20.0, ge=0.0, description="Unit price of a bottle delivery.")
    jug_price: float = Field(default=40.0, ge=0.0, description="Unit price of a jug delivery.")
    container_tracking: Literal["auto", "explicit"] = Field(
        default="auto",
        description=(
            "auto: every unit delivered to a one-time customer is tracked as a loaned container. "
            "explicit: only orders flagged as using company containers are tracked."
        ),
    )
    business_timezone: str = Field(
        default="Asia/Kolkata",
        description="IANA timezone used to decide which calendar day a delivery falls on.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )
    dev_role: Optional[Literal["none", "pending", "staff", "admin"]] = Field(
        default=None,
        description="Role granted to every caller when Supabase auth is not configured (local development only).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )
    supabase_schema: str = Field(default="public", description="Postgres schema holding the ledger tables.")
    supabase_timeout: int = Field(default=10, gt=0, description="Seconds before a PostgREST request is abandoned.")

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: Any) -> str:
        return str(value or "INFO").strip().upper()


settings = Settings()
