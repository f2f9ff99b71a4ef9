"""Centralized logging configuration for recuscan.

Usage:
    from recuscan.runtime import get_logger
    logger = get_logger(__name__)

    logger.debug("Section boundaries, extractor results")
    logger.info("Files read, results written")
    logger.warning("Recoverable problems")

Environment variables:
    RECUSCAN_LOG_LEVEL: Set log level (DEBUG, INFO, WARNING, ERROR). Default: INFO
"""

import logging
import os
import sys
from typing import TextIO

NAMESPACE = "recuscan"
LOG_LEVEL_ENV = "RECUSCAN_LOG_LEVEL"

# Default log level, can be overridden by environment variable
DEFAULT_LOG_LEVEL = logging.INFO

LOG_FORMAT = "%(levelname)s [%(name)s] %(message)s"
LOG_FORMAT_DEBUG = "%(levelname)s [%(name)s:%(lineno)d] %(message)s"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

_logging_configured = False


def level_from_env() -> int:
    """Read the log level from RECUSCAN_LOG_LEVEL; unknown values give the default."""
    return _LEVELS.get(os.environ.get(LOG_LEVEL_ENV, "").strip().upper(), DEFAULT_LOG_LEVEL)


def _formatter_for(level: int) -> logging.Formatter:
    return logging.Formatter(LOG_FORMAT_DEBUG if level <= logging.DEBUG else LOG_FORMAT)


def configure_logging(level: int | None = None, stream: TextIO | None = None) -> None:
    """Attach a stderr handler to the ``recuscan`` logger (once per process).

    Args:
        level: Log level to use. If None, reads RECUSCAN_LOG_LEVEL.
        stream: Where to write; defaults to sys.stderr so stdout stays clean
            for command output.
    """
    global _logging_configured

    if _logging_configured:
        return

    if level is None:
        level = level_from_env()

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(_formatter_for(level))

    namespace_logger = logging.getLogger(NAMESPACE)
    namespace_logger.setLevel(level)
    namespace_logger.addHandler(handler)
    namespace_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the ``recuscan`` namespace.

    Args:
        name: Module name, typically __name__

    Returns:
        Configured logger instance
    """
    configure_logging()

    # Modules of this package already live under the namespace.
    if name == NAMESPACE or name.startswith(NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{NAMESPACE}.{name}")


def set_log_level(level: int) -> None:
    """Change the log level at runtime (e.g. for ``--verbose``)."""
    namespace_logger = logging.getLogger(NAMESPACE)
    namespace_logger.setLevel(level)
    for handler in namespace_logger.handlers:
        handler.setFormatter(_formatter_for(level))
