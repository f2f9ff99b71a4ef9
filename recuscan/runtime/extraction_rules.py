"""Runtime loader for receipt extraction settings and category rules."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from recuscan.receipt.extraction_config import ExtractionConfig, build_extraction_config
from recuscan.runtime.logging import get_logger
from recuscan.runtime.paths import get_paths

logger = get_logger(__name__)


def _load_toml(path: Path) -> dict[str, Any]:
    """Load TOML file and return parsed dict; missing files map to empty dict."""
    try:
        import tomllib
    except ImportError:
        import tomli as tomllib  # type: ignore[no-redef]

    if not path.exists():
        logger.debug("No extraction rules at %s", path)
        return {}

    with open(path, "rb") as f:
        data = tomllib.load(f)
    return data if isinstance(data, dict) else {}


@lru_cache(maxsize=8)
def load_extraction_config(config_paths: tuple[str, ...] | None = None) -> ExtractionConfig:
    """
    Load extraction settings from TOML files into an ExtractionConfig.

    Files are applied in order over the built-in defaults. With no paths,
    the project file ``config/recuscan.toml`` is used when it exists.

    Raises:
        tomllib.TOMLDecodeError: if a present file is not valid TOML
    """
    if config_paths is None:
        files = [get_paths().extraction_rules]
    else:
        files = [Path(path) for path in config_paths]

    layers = tuple(_load_toml(path) for path in files)
    return build_extraction_config(layers)
