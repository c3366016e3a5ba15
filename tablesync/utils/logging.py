"""Logging setup for tablesync entry points.

Library modules only create loggers with logging.getLogger(__name__);
handlers and levels are installed here, by the CLI or by applications
that want tablesync's defaults.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from tablesync.core.config import config

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Install a stderr handler on the 'tablesync' logger.

    Args:
        level: Log level name (default: TABLESYNC_LOG_LEVEL)
        log_format: "text" or "json" (default: TABLESYNC_LOG_FORMAT)
    """
    level = (level or config.log_level).upper()
    log_format = log_format or config.log_format

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logger = logging.getLogger("tablesync")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
