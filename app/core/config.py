"""Environment-driven configuration for the console session service.

Every tunable lives on ``AppSettings``: where the data store is, which
timezone the shop runs in, which consoles exist and how the pricing tiers
are valued. Values are read once (``get_settings`` is cached) from the
process environment and the optional ``.env`` files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Console Session Tracker"
    BASE_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2])
    DATA_DIR: Path = Field(default_factory=lambda: Path(__file__).resolve().parents[2] / "data")
    TZ: str = "Africa/Cairo"
    LOG_LEVEL: str = "INFO"

    # Any SQLAlchemy URL works here, including a hosted Postgres instance.
    # Empty means a SQLite file under DATA_DIR.
    DB_URL: str = Field(
        default="",
        validation_alias=AliasChoices("DATABASE_URL", "DB_URL"),
    )

    HOST: str = "0.0.0.0"
    PORT: int = 8089

    CURRENCY: str = "EGP"
    CONSOLES: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["PS4", "PS3", "PS2", "PS1"])
    CONTROLLERS_TOTAL: int = Field(default=16, ge=0)

    # Pricing tiers (currency units). See app.services.pricing.
    GRACE_MINUTES: int = Field(default=10, ge=0)
    HOUR_TIER_PRICE: float = Field(default=25, ge=0)
    HALF_HOUR_TIER_PRICE: float = Field(default=15, ge=0)
    QUARTER_HOUR_TIER_PRICE: float = Field(default=10, ge=0)

    @field_validator("CONSOLES", mode="before")
    @classmethod
    def parse_consoles(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("CONSOLES must be a comma separated string or list")


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    if not settings.DB_URL:
        settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
        settings.DB_URL = f"sqlite:///{settings.DATA_DIR / 'data.db'}"
    return settings


settings = get_settings()
