"""Cross-cutting helpers: constants, output paths, report I/O."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .models import RunSummary

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_SUFFIX = ".py"
TREE_IMAGE_SUFFIX = "_tree.png"
OUTPUT_DIR_SUFFIX = "_parse_trees"
DEFAULT_SCALE = 1.2
BASE_DPI = 96
MODES = ("parse", "images")
DEFAULT_MODE = "parse"


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def default_output_dir(root: Path) -> Path:
    """Return ``<root>_parse_trees`` as a sibling of *root*."""
    return Path(f"{root}{OUTPUT_DIR_SUFFIX}")


def ensure_output_dir(output_dir: Path) -> Path:
    """Create *output_dir* if absent and return it."""
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def tree_image_name(source: Path, suffix: str = DEFAULT_SUFFIX) -> str:
    """Map ``pkg/module.py`` to ``module_tree.png``."""
    name = source.name
    if suffix and name.endswith(suffix):
        name = name[: -len(suffix)]
    return f"{name}{TREE_IMAGE_SUFFIX}"


# ---------------------------------------------------------------------------
# Report I/O
# ---------------------------------------------------------------------------


def summary_to_dict(summary: RunSummary) -> dict[str, Any]:
    return {
        "total": summary.total,
        "succeeded": summary.succeeded,
        "failed": summary.failed,
        "files": [asdict(record) for record in summary.records],
    }


def save_report(
    report_path: Path,
    summary: RunSummary,
    *,
    root: Path,
    mode: str,
) -> Path:
    """Write a JSON report of every record plus the totals and return its path."""
    report: dict[str, Any] = {
        "root": str(root),
        "mode": mode,
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
    report.update(summary_to_dict(summary))

    report_path.parent.mkdir(parents=True, exist_ok=True)
    with open(report_path, "w", encoding="utf-8") as fh:
        json.dump(report, fh, indent=2, ensure_ascii=False, default=str)
    return report_path
