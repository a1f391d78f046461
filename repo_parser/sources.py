"""Source file discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from .utils import DEFAULT_SUFFIX

log = logging.getLogger(__name__)


def discover_sources(root: Path, suffix: str = DEFAULT_SUFFIX) -> list[Path]:
    """Recursively find regular files under *root* whose name ends with *suffix*.

    Results are sorted by path. Raises ``FileNotFoundError`` when *root* does
    not exist and ``NotADirectoryError`` when it is not a directory.
    """
    if not root.exists():
        raise FileNotFoundError(f"Repository root not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Repository root is not a directory: {root}")

    found = sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.name.endswith(suffix)
    )
    log.debug("discover_sources: %s matching files under %s", len(found), root)
    return found
