"""
Runtime settings.

Environment-driven settings (TRAINLOAD_ prefix, optional .env file) for the
CLI and API, plus loading of the engine coefficient card.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trainload.schemas import EngineConfig


class Settings(BaseSettings):
    """Process-level settings; read once and cached by get_settings()."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Optional rotating log file")
    log_rotation: str = Field(default="10 MB", description="When the log file rotates (size or interval)")
    log_retention: str = Field(default="7 days", description="How long rotated log files are kept")
    engine_config_path: Optional[Path] = Field(
        default=None, description="JSON engine configuration card (defaults if unset)"
    )
    output_dir: Path = Field(
        default=Path("season_plans"), description="Where exported calendars are written"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TRAINLOAD_",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(
                f"Invalid TRAINLOAD_LOG_LEVEL '{value}'. Valid levels are: "
                f"{', '.join(sorted(valid_levels))}. Defaulting to INFO."
            )
            return "INFO"
        return upper_value


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()


def load_engine_config(settings: Optional[Settings] = None) -> EngineConfig:
    """
    Engine configuration from the settings' card, or the defaults.

    Args:
        settings: Settings to read the card path from (cached settings if omitted)

    Returns:
        EngineConfig

    Raises:
        FileNotFoundError: If a configured card does not exist
        ValueError: If the card is not a valid configuration
    """
    settings = settings or get_settings()
    if settings.engine_config_path is None:
        return EngineConfig()

    logger.info(f"Loading engine config from {settings.engine_config_path}")
    return EngineConfig.from_file(settings.engine_config_path)
