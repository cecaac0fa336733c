"""Unit tests for rolodex.core.logging — handler setup and formats."""

from __future__ import annotations

import io
import json
import logging

import pytest

from rolodex.core.config import LoggingConfig
from rolodex.core.logging import ROOT_LOGGER_NAME, configure_logging


@pytest.fixture(autouse=True)
def _reset_logger():
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    saved_handlers, saved_level = list(logger.handlers), logger.level
    yield
    logger.handlers = saved_handlers
    logger.setLevel(saved_level)


class TestConfigureLogging:
    def test_text_format(self) -> None:
        buf = io.StringIO()
        configure_logging(LoggingConfig(level="INFO"), stream=buf)
        logging.getLogger("rolodex.core.store.database").info("opened %s", "people.sqlite")
        line = buf.getvalue()
        assert "rolodex.core.store.database - INFO - opened people.sqlite" in line

    def test_json_format(self) -> None:
        buf = io.StringIO()
        configure_logging(LoggingConfig(level="DEBUG", format="json"), stream=buf)
        logging.getLogger("rolodex.test").debug("hello %d", 7)
        entry = json.loads(buf.getvalue().strip())
        assert entry["level"] == "DEBUG"
        assert entry["logger"] == "rolodex.test"
        assert entry["message"] == "hello 7"

    def test_level_filters(self) -> None:
        buf = io.StringIO()
        configure_logging(LoggingConfig(level="WARNING"), stream=buf)
        logging.getLogger("rolodex.test").info("quiet")
        assert buf.getvalue() == ""

    def test_idempotent(self) -> None:
        configure_logging(LoggingConfig(), stream=io.StringIO())
        logger = configure_logging(LoggingConfig(), stream=io.StringIO())
        ours = [h for h in logger.handlers if getattr(h, "_rolodex_handler", False)]
        assert len(ours) == 1
