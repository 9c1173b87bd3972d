"""Repository workspace helpers.

This module handles:
- Locating the repository root (the nearest directory with CMakeLists.txt)
- Removing the build, projects and bundles directories
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from prebuild_utils.types import WORKSPACE_DIRS

logger = logging.getLogger(__name__)

ROOT_MARKER = "CMakeLists.txt"


class RepoRootNotFoundError(Exception):
    """Raised when no repository root can be found."""

    def __init__(self, start_dir: Path, code: str = "repo_root_not_found") -> None:
        super().__init__(
            f"Could not find repo root from {start_dir} ({ROOT_MARKER} not found)"
        )
        self.start_dir = start_dir
        self.code = code


def find_repo_root(start_dir: Path) -> Path:
    """Find the repository root by walking up from start_dir.

    Args:
        start_dir: Directory to start searching from.

    Returns:
        The nearest directory (start_dir included) containing CMakeLists.txt.

    Raises:
        RepoRootNotFoundError: If no ancestor contains CMakeLists.txt.
    """
    start = Path(start_dir).resolve()
    for directory in (start, *start.parents):
        if (directory / ROOT_MARKER).is_file():
            return directory
    raise RepoRootNotFoundError(start)


def clean_workspace(root_dir: Path) -> list[Path]:
    """Remove the pipeline's output directories under the repository root.

    Missing directories are skipped, so repeated runs are no-ops.

    Args:
        root_dir: Repository root directory.

    Returns:
        Directories that were removed.
    """
    removed: list[Path] = []
    for name in WORKSPACE_DIRS:
        full = Path(root_dir) / name
        if full.exists():
            shutil.rmtree(full)
            logger.info("> Removed %s", full)
            removed.append(full)
    return removed


__all__ = [
    "ROOT_MARKER",
    "RepoRootNotFoundError",
    "clean_workspace",
    "find_repo_root",
]
