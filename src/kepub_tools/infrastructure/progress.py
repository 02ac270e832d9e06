"""Progress sink writing through the standard logging module."""

from __future__ import annotations

import logging


class LoggingProgress:
    """Default ``ProgressSink``: forwards progress lines to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("kepub_tools.progress")

    def info(self, message: str) -> None:
        self._logger.info(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)
