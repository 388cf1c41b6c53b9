"""Tests for logging setup."""
import logging

import pytest

from scholarmatch.logging_config import setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    def test_console_and_file_handlers(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "app.log"
        setup_logging(log_level="warning", log_format="simple", log_file=str(log_file))

        handlers = restore_root_logger.handlers
        assert len(handlers) == 2
        assert handlers[0].level == logging.WARNING
        assert isinstance(handlers[1], logging.FileHandler)

        logging.getLogger("scholarmatch.test").warning("filter latency high")
        handlers[1].flush()
        assert "WARNING - scholarmatch.test - filter latency high" in log_file.read_text()

    def test_module_levels(self, restore_root_logger):
        setup_logging(log_format="json")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("scholarmatch.eligibility").level == logging.INFO
