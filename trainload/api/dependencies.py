"""Shared route dependencies."""

from trainload.config import load_engine_config
from trainload.schemas import EngineConfig


def get_engine_config() -> EngineConfig:
    """Engine configuration for a request (configured card or defaults)."""
    return load_engine_config()
