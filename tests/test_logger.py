"""
Tests for logging setup.

Covers:
- File sink created from settings, with level filtering
- Level override from the command line
"""

import pytest
from loguru import logger

from trainload.config import Settings
from trainload.logger import setup_logger


@pytest.fixture(autouse=True)
def reset_sinks():
    yield
    logger.remove()


def test_file_sink_from_settings(tmp_path):
    log_file = tmp_path / "logs" / "trainload.log"
    settings = Settings(_env_file=None, log_level="INFO", log_file=log_file)

    setup_logger(settings)
    logger.debug("hidden detail")
    logger.info("planned 28 weeks")
    logger.remove()

    text = log_file.read_text()
    assert "planned 28 weeks" in text
    assert "hidden detail" not in text


def test_level_override(tmp_path):
    log_file = tmp_path / "trainload.log"
    settings = Settings(_env_file=None, log_level="WARNING", log_file=log_file)

    setup_logger(settings, level="debug")
    logger.debug("block 2 duration")
    logger.remove()

    assert "block 2 duration" in log_file.read_text()
