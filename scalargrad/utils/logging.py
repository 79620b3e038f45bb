"""
Logging helpers.

All scalargrad loggers live under the ``scalargrad`` namespace. The package
root carries a ``NullHandler`` so the library stays silent unless the caller
configures logging, either through the standard ``logging`` API or through
:func:`configure_logging`.
"""

import logging
import sys
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "scalargrad"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class KeyValueFormatter(logging.Formatter):
    """
    Format records as ``key=value`` pairs.

    Structured fields passed through ``extra={"fields": {...}}`` are appended
    after the message in insertion order.
    """

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"time={self.formatTime(record, self.datefmt)}",
            f"level={record.levelname}",
            f"logger={record.name}",
            f"msg={record.getMessage()!r}",
        ]
        fields: Dict[str, Any] = getattr(record, "fields", None) or {}
        for key, value in fields.items():
            parts.append(f"{key}={value}")
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger inside the ``scalargrad`` namespace."""
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(level: Union[int, str] = logging.INFO, stream=None) -> logging.Logger:
    """
    Attach a key=value stream handler to the package root logger.

    Calling this more than once replaces the previously installed handler
    rather than stacking duplicates.

    Args:
        level: Logging level (int or name such as "DEBUG")
        stream: Output stream, defaults to stderr

    Returns:
        The configured package root logger
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown logging level: {level}")
        level = resolved

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, "_scalargrad_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(KeyValueFormatter())
    handler._scalargrad_handler = True
    logger.addHandler(handler)
    return logger
