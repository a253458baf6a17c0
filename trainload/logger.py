"""
Loguru sinks for the CLI and the API.

Engine modules only import loguru's logger. The entry points call
setup_logger() once per process, which replaces any existing sinks with a
console sink and, when TRAINLOAD_LOG_FILE is set, a rotating file sink.
"""

import sys
from typing import Optional

from loguru import logger

from trainload.config import Settings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def setup_logger(settings: Optional[Settings] = None, level: Optional[str] = None) -> None:
    """
    Configure the process-wide sinks from settings.

    Args:
        settings: Runtime settings (cached settings if omitted)
        level: Level overriding settings.log_level, e.g. from --log-level
    """
    settings = settings or get_settings()
    level = (level or settings.log_level).upper()

    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            settings.log_file,
            format=FILE_FORMAT,
            level=level,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="zip",
        )

    logger.debug(f"Logging at {level} (file: {settings.log_file or 'none'})")
