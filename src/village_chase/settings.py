"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DisplaySettings(BaseSettings):
    """Window and frame pacing settings."""

    model_config = SettingsConfigDict(env_prefix="VILLAGE_CHASE_DISPLAY_", extra="ignore")

    window_width: int = 960
    window_height: int = 600
    title: str = "Village Chase"
    fullscreen: bool = False

    # Simulation is calibrated per tick, one tick per displayed frame
    fps: int = Field(default=60, ge=1, le=240)


class AISettings(BaseSettings):
    """Gemini collaborator settings."""

    model_config = SettingsConfigDict(env_prefix="VILLAGE_CHASE_AI_", extra="ignore")

    gemini_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )

    # Model names
    commentary_model: str = "gemini-3-flash-preview"
    background_model: str = "gemini-2.5-flash-image"

    # Timeouts
    commentary_timeout: float = 30.0
    background_timeout: float = 120.0

    # Retry settings
    max_retries: int = 3
    retry_delay: float = 1.0

    background_aspect_ratio: str = "16:9"


class HeadlessSettings(BaseSettings):
    """Settings for the timer driven host without a window."""

    model_config = SettingsConfigDict(env_prefix="VILLAGE_CHASE_HEADLESS_", extra="ignore")

    runs: int = Field(default=3, ge=1)
    autoplay: bool = True
    # Jump when the nearest obstacle is this many px ahead of the runner
    jump_lookahead: float = 40.0
    # Safety cap per run, in ticks
    max_ticks: int = 60 * 60 * 5


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="VILLAGE_CHASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env: Literal["simulator", "headless"] = "simulator"
    debug: bool = False

    # Logging
    log_file: Optional[Path] = None

    # Nested settings
    display: DisplaySettings = Field(default_factory=DisplaySettings)
    ai: AISettings = Field(default_factory=AISettings)
    headless: HeadlessSettings = Field(default_factory=HeadlessSettings)

    @property
    def is_simulator(self) -> bool:
        """Check if running with a window."""
        return self.env == "simulator"

    @property
    def is_headless(self) -> bool:
        return self.env == "headless"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
