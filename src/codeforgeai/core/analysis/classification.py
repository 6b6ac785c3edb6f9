from __future__ import annotations

"""
Classification Overlay.

Reads the persisted analysis result and copies its per-node labels onto a
freshly built tree. The result file is written verbatim from a model
response, so it is parsed leniently and any structural problem simply
yields no labels.
"""

import logging
import os
import posixpath
from typing import Dict

from codeforgeai.core.analysis.tree_serializer import deserialize_tree
from codeforgeai.domain.constants import ANALYSIS_RESULT_FILENAME
from codeforgeai.domain.errors import FormatError
from codeforgeai.domain.tree_models import Classification, Node

logger = logging.getLogger(__name__)


def load_classifications(project_root: str) -> Dict[str, Classification]:
    """
    Map root-relative paths to labels from the analysis result file.

    Args:
        project_root: Directory holding the analysis result file.

    Returns:
        Dict[str, Classification]: Empty when the file is missing or unusable.
    """
    result_path = os.path.join(project_root, ANALYSIS_RESULT_FILENAME)
    if not os.path.isfile(result_path):
        logger.warning(f"No analysis result at {result_path}. Run 'codeforgeai analyze' first.")
        return {}

    try:
        with open(result_path, "r", encoding="utf-8") as f:
            classified = deserialize_tree(f.read(), strict=False)
    except (OSError, UnicodeDecodeError, FormatError) as e:
        logger.warning(f"Analysis result at {result_path} is unusable: {e}")
        return {}

    return {
        _normalize(node.path): node.classification
        for node in classified.walk()
        if node.classification is not None
    }


def apply_classifications(node: Node, labels: Dict[str, Classification], base: str = "") -> int:
    """
    Copy labels onto a tree in place.

    Args:
        node: Tree root whose paths are relative to `base`.
        labels: Root-relative path to label mapping.
        base: Location of the tree root relative to the project root.

    Returns:
        int: Number of nodes that received a label.
    """
    applied = 0
    prefix = _normalize(base)
    for n in node.walk():
        key = _normalize(posixpath.join(prefix, n.path)) if prefix else _normalize(n.path)
        label = labels.get(key)
        if label is not None:
            n.classification = label
            applied += 1
    return applied


def _normalize(path: str) -> str:
    cleaned = posixpath.normpath(path.replace(os.sep, "/")) if path else ""
    return "" if cleaned == "." else cleaned.strip("/")
