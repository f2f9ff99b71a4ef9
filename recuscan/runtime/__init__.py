"""Runtime infrastructure for recuscan.

This package provides process/runtime services including:
- Logging setup via get_logger()
- Path resolution via get_paths(), ProjectPaths
- Extraction settings loading via load_extraction_config()

Usage:
    from recuscan.runtime import get_logger, load_extraction_config

    logger = get_logger(__name__)
    config = load_extraction_config()
"""

from recuscan.runtime.extraction_rules import load_extraction_config
from recuscan.runtime.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_FORMAT,
    LOG_FORMAT_DEBUG,
    configure_logging,
    get_logger,
    set_log_level,
)
from recuscan.runtime.paths import (
    ProjectPaths,
    get_paths,
    reset_paths,
)

__all__ = [
    # Logging
    "get_logger",
    "configure_logging",
    "set_log_level",
    "DEFAULT_LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FORMAT_DEBUG",
    # Rules
    "load_extraction_config",
    # Paths
    "get_paths",
    "reset_paths",
    "ProjectPaths",
]
