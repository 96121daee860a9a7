"""Environment-driven defaults using Pydantic Settings."""
from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from patternplay.core.config import SPEED_FACTORS
from patternplay.logging import parse_level


class PatternPlaySettings(BaseSettings):
    """Defaults loaded from ``PATTERNPLAY_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="PATTERNPLAY_", extra="ignore")

    # Playback
    default_mode: str = "auto"  # "auto" or "step"
    default_speed: float = 1.0
    seed: int | None = None

    # Logging
    log_level: str = "info"
    log_enabled: bool = True
    log_timestamps: bool = True

    @field_validator("default_mode")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in ("auto", "step"):
            raise ValueError("default_mode must be 'auto' or 'step'")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        return parse_level(value).value

    @field_validator("default_speed")
    @classmethod
    def _check_speed(cls, value: float) -> float:
        if value not in SPEED_FACTORS:
            raise ValueError(f"default_speed must be one of {SPEED_FACTORS}")
        return value


@lru_cache
def get_settings() -> PatternPlaySettings:
    """Get cached settings instance."""
    return PatternPlaySettings()

