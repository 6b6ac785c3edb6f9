from __future__ import annotations

"""
Directory Tree Structure Data Models.

Provides the recursive node definition used by the analysis subsystem to
describe a project tree, together with the classification labels attached
to nodes by the directory classification model.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class NodeKind(str, Enum):
    """Entry type as written in the serialized tree."""
    FILE = "file"
    DIRECTORY = "directory"


class Classification(str, Enum):
    """Label assigned to a node by the classification model."""
    USEFUL = "useful"
    USELESS = "useless"
    SOURCE = "source"

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass
class Node:
    """
    One file or directory entry of the project tree.

    Attributes:
        kind: File or directory.
        name: Entry basename.
        path: Path relative to the tree root ("" for the root itself),
            using "/" as separator.
        children: Ordered child nodes (directories only), in listing order.
        classification: Optional label applied by an external model call.
        size: Byte size as reported by lstat (files only).
    """
    kind: NodeKind
    name: str
    path: str
    children: List["Node"] = field(default_factory=list)
    classification: Optional[Classification] = None
    size: Optional[int] = None

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIRECTORY

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants, depth-first, in child order."""
        yield self
        for child in self.children:
            yield from child.walk()


def useful_files(node: Optional[Node]) -> List[str]:
    """
    Collect the relative paths of files classified as useful.

    Args:
        node: Tree root (may be None).

    Returns:
        List[str]: Relative file paths in depth-first order.
    """
    if node is None:
        return []
    return [
        n.path for n in node.walk()
        if n.kind is NodeKind.FILE and n.classification is Classification.USEFUL
    ]
