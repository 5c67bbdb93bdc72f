"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SWIFTROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "SwiftRoute Dispatch API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for persisted state.")
    snapshot_file: Path = Field(
        default=Path("swiftroute_state.json"),
        description="JSON snapshot holding stops, saved routes, customers and preferences; relative to data_root.",
    )
    default_depot_latitude: float = Field(default=34.0522, ge=-90, le=90)
    default_depot_longitude: float = Field(default=-118.2437, ge=-180, le=180)
    default_start_time: str = Field(
        default="09:00 AM",
        description="Departure time from the depot used when system time is not requested.",
    )
    km_per_degree: float = Field(
        default=111.0,
        gt=0.0,
        description="Conversion from planar degree distance to kilometers.",
    )

    # Gemini estimation / address resolution
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Gemini generative language endpoint.",
    )
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    gemini_model: str = Field(default="gemini-3-flash-preview")
    estimator_temperature: float = Field(default=0.4, ge=0.0, le=2.0)
    bulk_parse_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    estimator_timeout_seconds: float = Field(default=30.0, gt=0.0)
    default_language: Literal["en", "es", "de"] = "en"

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("snapshot_file", mode="before")
    @classmethod
    def _expand_user(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser()

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


settings = Settings()
