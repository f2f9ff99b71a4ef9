"""Centralized path management for recuscan.

Configuration lives under a project root: ``RECUSCAN_HOME`` when set, the
current working directory otherwise.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

HOME_ENV = "RECUSCAN_HOME"


def _get_project_root() -> Path:
    """Determine the project root directory."""
    home = os.environ.get(HOME_ENV, "").strip()
    if home:
        return Path(home).expanduser()
    return Path.cwd()


@dataclass
class ProjectPaths:
    """Container for all project-related paths."""

    root: Path = field(default_factory=_get_project_root)

    def __post_init__(self) -> None:
        # Ensure root is resolved to absolute path
        self.root = self.root.resolve()

    # --- Configuration paths ---
    @property
    def config(self) -> Path:
        """Configuration directory (config/)."""
        return self.root / "config"

    @property
    def extraction_rules(self) -> Path:
        """Project-level extraction tuning and category rules TOML file."""
        return self.config / "recuscan.toml"


# Module-level singleton
_paths: ProjectPaths | None = None


def get_paths() -> ProjectPaths:
    """Get the singleton ProjectPaths instance."""
    global _paths
    if _paths is None:
        _paths = ProjectPaths()
    return _paths


def reset_paths() -> None:
    """Forget the cached root (after RECUSCAN_HOME changes)."""
    global _paths
    _paths = None
