from __future__ import annotations

"""
Tree Renderer.

Converts Node trees into visual ASCII representations for the terminal,
keeping the directory-listing order of the underlying tree.
"""

from typing import List, Optional

from codeforgeai.domain.tree_models import Node

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_tree(node: Node, show_classification: bool = False) -> List[str]:
    """
    Render a tree as a list of lines, root name first.

    Args:
        node: Tree root.
        show_classification: Append "[label]" to classified entries.

    Returns:
        List[str]: Visual lines of the tree.
    """
    lines: List[str] = [_label(node, show_classification) + ("/" if node.is_dir else "")]
    render_tree_structure(node, lines, prefix="", show_classification=show_classification)
    return lines


def render_tree_structure(
        node: Node,
        lines: List[str],
        prefix: str = "",
        show_classification: bool = False,
) -> None:
    """
    Recursively append the children of a node to the accumulator.

    Uses standard ASCII connectors (├──, └──) and manages indentation
    levels for nested directories.

    Args:
        node: Current node whose children are rendered.
        lines: Accumulator list for output strings.
        prefix: Indentation prefix for the current recursion level.
        show_classification: Append "[label]" to classified entries.
    """
    total = len(node.children)

    for i, child in enumerate(node.children):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        suffix = "/" if child.is_dir else ""
        lines.append(f"{prefix}{connector}{_label(child, show_classification)}{suffix}")

        if child.is_dir:
            new_prefix = prefix + ("    " if is_last else "│   ")
            render_tree_structure(child, lines, new_prefix, show_classification)


def _label(node: Node, show_classification: bool) -> str:
    tag: Optional[str] = node.classification.value if node.classification else None
    if show_classification and tag:
        return f"{node.name} [{tag}]"
    return node.name
