"""Logging setup for runstat.

Configures a console handler whose level follows the ``--verbose`` flag and
an optional file handler that always logs at DEBUG.  Reports are written by
the CLI itself; the logger carries progress and diagnostics only.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "runstat"
_DEFAULT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(message)s"


def setup_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure and return the root runstat logger.

    Args:
        verbose: If True, set console log level to DEBUG.
        log_file: If provided, add a file handler at DEBUG level to this path.

    Returns:
        The configured root logger for runstat.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    # Remove any existing handlers to allow reconfiguration.
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    logger.addHandler(console)

    # File handler (always DEBUG).
    if log_file is not None:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(fh)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a named child logger under the runstat namespace."""
    return logging.getLogger(f"{_LOGGER_NAME}.{name}")
