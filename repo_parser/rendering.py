"""Parse tree rendering with Graphviz."""

from __future__ import annotations

import logging
import time
import traceback
from pathlib import Path
from typing import Optional

from graphviz import Digraph, escape
from lark import Token, Tree

from .models import ParseRecord
from .utils import BASE_DPI, DEFAULT_SCALE, DEFAULT_SUFFIX, tree_image_name

log = logging.getLogger(__name__)

MAX_LABEL_CHARS = 40


def _token_label(token: Token) -> str:
    text = " ".join(str(token).split())
    if len(text) > MAX_LABEL_CHARS:
        text = text[: MAX_LABEL_CHARS - 3] + "..."
    return escape(text or token.type)


def build_tree_graph(tree: Tree, *, scale: float = DEFAULT_SCALE) -> Digraph:
    """Convert a lark tree into a top-down digraph on a white background.

    Rule nodes are labelled with the rule name, token leaves with their text.
    The graph is sized by its own layout; *scale* only sets the resolution.
    """
    dot = Digraph(
        comment="Parse Tree",
        graph_attr={
            "rankdir": "TB",
            "bgcolor": "white",
            "dpi": str(round(BASE_DPI * scale)),
        },
        node_attr={"fontname": "Helvetica", "fontsize": "11"},
    )

    node_count = 0

    def add_nodes_edges(node) -> str:
        nonlocal node_count
        name = f"node{node_count}"
        node_count += 1

        if isinstance(node, Tree):
            dot.node(name, escape(str(node.data)), shape="ellipse")
            for child in node.children:
                if child is None:
                    continue
                dot.edge(name, add_nodes_edges(child))
        else:
            dot.node(name, _token_label(node), shape="box", style="filled", fillcolor="lightgray")
        return name

    add_nodes_edges(tree)
    return dot


def render_tree_image(tree: Tree, output_path: Path, *, scale: float = DEFAULT_SCALE) -> Path:
    """Rasterize *tree* to a PNG at *output_path*.

    Raises on failure (for example ``graphviz.ExecutableNotFound``); nothing is
    written unless Graphviz produced the whole image.
    """
    dot = build_tree_graph(tree, scale=scale)
    data = dot.pipe(format="png")
    output_path.write_bytes(data)
    return output_path


def save_tree_image(
    record: ParseRecord,
    tree: Optional[Tree],
    output_dir: Path,
    *,
    suffix: str = DEFAULT_SUFFIX,
    scale: float = DEFAULT_SCALE,
) -> Optional[Path]:
    """Render the tree for *record* into *output_dir*.

    Never raises; a rendering error marks the record as failed and no image is
    written for it.
    """
    if tree is None:
        log.warning("save_tree_image: no parse tree for %s, skipping image", record.filepath)
        return None

    if record.diagnostics:
        log.warning("File has parse errors, tree may be incomplete: %s", record.filepath)

    output_path = output_dir / tree_image_name(Path(record.filepath), suffix)
    t0 = time.time()
    try:
        render_tree_image(tree, output_path, scale=scale)
    except Exception as exc:
        record.status = "failure"
        record.error = traceback.format_exc()
        log.error("Error saving tree: %s: %s", record.filepath, exc)
        log.debug("save_tree_image: traceback\n%s", record.error)
        return None

    record.image_path = str(output_path)
    log.info("Tree saved to: %s (%.2fs)", output_path.name, time.time() - t0)
    return output_path
