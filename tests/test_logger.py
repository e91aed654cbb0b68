"""Unit tests for logger setup."""

import warnings

import pytest
from loguru import logger

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from utils.logger import setup_logger


@pytest.fixture
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


class TestSetupLogger:
    """Tests for setup_logger."""

    def test_writes_log_file(self, tmp_path, restore_logger):
        log_file = tmp_path / "logs" / "cv.log"
        setup_logger(log_file=str(log_file), level="DEBUG")

        logger.debug("fold 1 done")
        logger.remove()

        assert "fold 1 done" in log_file.read_text()

    def test_leaves_warnings_hook_alone(self, restore_logger):
        """Python's warning display is not replaced."""
        original = warnings.showwarning
        setup_logger(level="WARNING")

        assert warnings.showwarning is original
