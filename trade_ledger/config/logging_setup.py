"""Logging bootstrap for runtime entry points."""

from __future__ import annotations

import logging
import sys

_PACKAGE_LOGGER_NAME = "trade_ledger"
_LOG_FORMAT = "[%(asctime)s] [%(levelname)-8s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"


def logging_configure(level: str = "INFO") -> logging.Logger:
    """Install one structured stream handler on the package logger.

    Repeated calls only update the level, so entry points may call this freely.

    Args:
        level: Logging level name.

    Returns:
        logging.Logger: Configured package logger.

    Raises:
        ValueError: Raised when the level name is unknown.
    """

    resolved_level = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved_level, int):
        raise ValueError(f"unsupported log level={level}")

    package_logger = logging.getLogger(_PACKAGE_LOGGER_NAME)
    package_logger.setLevel(resolved_level)
    if not any(handler.get_name() == _PACKAGE_LOGGER_NAME for handler in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_PACKAGE_LOGGER_NAME)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        package_logger.addHandler(handler)
    return package_logger


__all__ = ["logging_configure"]
