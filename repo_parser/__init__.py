"""Walk a repository, parse each Python file with lark, report or draw the trees.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from repo_parser import X`` works.
"""

from .models import ParseRecord, RunSummary, SyntaxDiagnostic
from .parsing import (
    ErrorCollector,
    create_python_parser,
    parse_single_file,
    parse_source,
    read_source,
)
from .rendering import build_tree_graph, render_tree_image, save_tree_image
from .sources import discover_sources
from .utils import (
    DEFAULT_SCALE,
    DEFAULT_SUFFIX,
    MODES,
    TREE_IMAGE_SUFFIX,
    default_output_dir,
    ensure_output_dir,
    save_report,
    tree_image_name,
)

__all__ = [
    # Models
    "ParseRecord",
    "RunSummary",
    "SyntaxDiagnostic",
    # Constants
    "DEFAULT_SUFFIX",
    "DEFAULT_SCALE",
    "TREE_IMAGE_SUFFIX",
    "MODES",
    # Utils
    "default_output_dir",
    "ensure_output_dir",
    "tree_image_name",
    "save_report",
    # Sources
    "discover_sources",
    # Parsing
    "create_python_parser",
    "ErrorCollector",
    "read_source",
    "parse_source",
    "parse_single_file",
    # Rendering
    "build_tree_graph",
    "render_tree_image",
    "save_tree_image",
]
