from __future__ import annotations

"""
Directory Tree Builder.

Walks a root directory and produces the in-memory Node tree consumed by the
classification and edit pipelines. Ignored entries are pruned before they
are visited, symbolic links are recorded without being followed, and
unreadable entries are skipped so one bad subtree never fails the build.
"""

import logging
import os
import stat
from typing import Optional

from codeforgeai.core.analysis.ignore_rules import IgnoreRuleSet, load_ignore_rules, matches
from codeforgeai.domain.errors import FileSystemError
from codeforgeai.domain.tree_models import Node, NodeKind

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_tree(root_dir: str, rules: Optional[IgnoreRuleSet] = None) -> Node:
    """
    Build the ignore-pruned tree rooted at root_dir.

    Args:
        root_dir: Directory (or single file) to describe.
        rules: Pre-loaded ignore rules. When omitted, the ignore file found
            at root_dir is loaded.

    Returns:
        Node: Root node whose relative path is "".

    Raises:
        FileSystemError: If the root itself cannot be inspected or listed.
    """
    root = os.path.abspath(root_dir)
    try:
        st = os.lstat(root)
    except OSError as e:
        raise FileSystemError(f"Cannot access '{root}': {e.strerror or e}", root) from e

    if rules is None:
        rules = load_ignore_rules(root)

    name = os.path.basename(root) or root
    if not stat.S_ISDIR(st.st_mode):
        return Node(kind=NodeKind.FILE, name=name, path="", size=st.st_size)

    node = Node(kind=NodeKind.DIRECTORY, name=name, path="")
    try:
        _populate_children(node, root, rules)
    except OSError as e:
        raise FileSystemError(f"Cannot list '{root}': {e.strerror or e}", root) from e

    logger.debug(f"Built tree for {root} ({sum(1 for _ in node.walk())} nodes).")
    return node

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _populate_children(node: Node, abs_dir: str, rules: IgnoreRuleSet) -> None:
    """
    Attach the children of a directory node, in listing order.

    Raises:
        OSError: If the directory itself cannot be listed.
    """
    with os.scandir(abs_dir) as it:
        entries = list(it)

    for entry in entries:
        rel_path = f"{node.path}/{entry.name}" if node.path else entry.name
        try:
            entry_is_dir = entry.is_dir(follow_symlinks=False)
        except OSError as e:
            logger.debug(f"Skipping unreadable entry '{rel_path}': {e}")
            continue

        if matches(rel_path, rules, is_dir=entry_is_dir):
            continue

        child = _build_child(entry, rel_path, entry_is_dir, rules)
        if child is not None:
            node.children.append(child)


def _build_child(
        entry: os.DirEntry,
        rel_path: str,
        entry_is_dir: bool,
        rules: IgnoreRuleSet,
) -> Optional[Node]:
    """Create the node for one entry, or None if it cannot be read."""
    if entry_is_dir:
        child = Node(kind=NodeKind.DIRECTORY, name=entry.name, path=rel_path)
        try:
            _populate_children(child, entry.path, rules)
        except OSError as e:
            logger.warning(f"Skipping unreadable directory '{rel_path}': {e}")
            return None
        return child

    # Files and symlinks are described by lstat; links are never followed
    try:
        st = entry.stat(follow_symlinks=False)
    except OSError as e:
        logger.debug(f"Skipping entry '{rel_path}': {e}")
        return None
    return Node(kind=NodeKind.FILE, name=entry.name, path=rel_path, size=st.st_size)
