"""Logging setup for the ``rolodex`` logger tree."""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import TextIO

from rolodex.core.config import LoggingConfig
from rolodex.core.constants import LOG_DATE_FORMAT, LOG_LINE_FORMAT

ROOT_LOGGER_NAME = "rolodex"

# Marks the handler we installed so repeated calls replace it instead of stacking.
_HANDLER_ATTR = "_rolodex_handler"


class JsonFormatter(logging.Formatter):
    """One JSON object per line: ts, level, logger, message (+ exc)."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(config: LoggingConfig, stream: TextIO | None = None) -> logging.Logger:
    """Attach a single stderr handler to the ``rolodex`` logger.

    Safe to call more than once; the previous handler is replaced.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_ATTR, False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if config.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_LINE_FORMAT, datefmt=LOG_DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)

    logger.addHandler(handler)
    logger.setLevel(config.level)
    return logger
