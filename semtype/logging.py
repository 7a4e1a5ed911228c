"""Diagnostics for semtype runs.

stdout is reserved for the computed version, so every log record goes to
stderr. The change report is emitted at INFO; ``--verbose`` adds the
scanner and state-store chatter at DEBUG.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_LOGGER_NAME = "semtype"
_CONSOLE_FORMAT = "semtype: %(message)s"
_CONSOLE_LEVEL_FORMAT = "semtype: %(levelname)s: %(message)s"
_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class _ConsoleFormatter(logging.Formatter):
    """Prints report lines bare and tags everything else with its level."""

    def __init__(self) -> None:
        super().__init__(_CONSOLE_FORMAT)
        self._tagged = logging.Formatter(_CONSOLE_LEVEL_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return super().format(record)
        return self._tagged.format(record)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger such as ``semtype.scanner``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route semtype diagnostics to stderr and, optionally, to ``log_file``."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # main() may run more than once per process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(_ConsoleFormatter())
    logger.addHandler(console)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
