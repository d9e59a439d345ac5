"""
Unit Tests for Logging Module

Tests logger creation, configuration and stage logging.
"""

from unittest.mock import MagicMock

import pytest

from sugar_cache.core.config.constants import Stage
from sugar_cache.core.logging.logger import (
    add_log_level_name,
    add_timestamp,
    get_logger,
    log_stage,
    setup_logging,
)


@pytest.mark.unit
class TestLoggerCreation:
    def test_get_logger_returns_logger_instance(self):
        logger = get_logger(__name__)
        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_setup_logging_accepts_formats(self, log_format):
        setup_logging(log_level="DEBUG", log_format=log_format)
        get_logger("configured").info("configured", stage="TEST.SETUP")


@pytest.mark.unit
class TestLogStage:
    def test_log_stage_passes_enum_value(self):
        logger = MagicMock()

        log_stage(logger, Stage.CACHE_GET, "Memory tier hit", cache_key="abc")

        logger.info.assert_called_once_with("Memory tier hit", stage="CACHE.GET", cache_key="abc")

    def test_log_stage_accepts_plain_string_and_level(self):
        logger = MagicMock()

        log_stage(logger, "REMOTE.SWEEP", "Swept", level="debug", removed=3)

        logger.debug.assert_called_once_with("Swept", stage="REMOTE.SWEEP", removed=3)


@pytest.mark.unit
class TestProcessors:
    def test_add_timestamp(self):
        event = add_timestamp(None, "info", {})
        assert event["timestamp"].endswith("Z")

    def test_add_log_level_name_uppercases(self):
        assert add_log_level_name(None, "info", {"level": "info"})["level"] == "INFO"
