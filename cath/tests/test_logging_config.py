#!/usr/bin/env python3
"""
Tests for central logging configuration
"""
import logging
import os

import pytest

from cath.core.logging_config import LoggingManager


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLoggingManager:

    def test_level_from_config(self):
        LoggingManager.configure(config={'logging': {'level': 'warning'}})
        assert logging.getLogger().level == logging.WARNING
        assert logging.getLogger('urllib3').level == logging.WARNING

    def test_verbose_wins(self):
        LoggingManager.configure(verbose=True, config={'logging': {'level': 'ERROR'}})
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        assert LoggingManager.resolve_level(False, {'level': 'chatty'}) == logging.INFO

    def test_log_dir_creates_component_file(self, tmp_path):
        log_dir = tmp_path / "logs"
        logger = LoggingManager.configure(component="cath", log_dir=str(log_dir))
        logger.warning("split started")

        files = os.listdir(log_dir)
        assert len(files) == 1
        assert files[0].startswith("cath_") and files[0].endswith(".log")

    def test_get_logger_namespace(self):
        assert LoggingManager.get_logger("extractor").name == "cath.extractor"
        assert LoggingManager.get_logger("cath.service").name == "cath.service"
