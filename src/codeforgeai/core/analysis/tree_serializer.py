from __future__ import annotations

"""
Tree Serializer.

Converts Node trees to and from the canonical JSON document:

    {"type": "file"|"directory", "name": str, "path": str,
     "children": [...], "classification": str, "size": int}

Field order is stable and indentation uses two spaces. "children" is written
for directories only, "size" for files only, and "classification" only when
set. When reading, "contents" is accepted as an alias of "children" because
classification models frequently answer with that key.
"""

import json
from typing import Any, Dict, List, Mapping, Optional

from codeforgeai.domain.errors import FormatError
from codeforgeai.domain.tree_models import Classification, Node, NodeKind

# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def serialize_tree(node: Node) -> str:
    """
    Render a tree as indented JSON.

    Args:
        node: Tree root.

    Returns:
        str: JSON document with two-space indentation.
    """
    return json.dumps(node_to_dict(node), ensure_ascii=False, indent=2)


def node_to_dict(node: Node) -> Dict[str, Any]:
    """Convert a node (recursively) to an ordered plain dictionary."""
    data: Dict[str, Any] = {
        "type": node.kind.value,
        "name": node.name,
        "path": node.path,
    }
    if node.kind is NodeKind.DIRECTORY:
        data["children"] = [node_to_dict(child) for child in node.children]
    if node.classification is not None:
        data["classification"] = node.classification.value
    if node.kind is NodeKind.FILE and node.size is not None:
        data["size"] = node.size
    return data

# -----------------------------------------------------------------------------
# DESERIALIZATION
# -----------------------------------------------------------------------------

def deserialize_tree(text: str, *, strict: bool = True) -> Node:
    """
    Parse a JSON document back into a Node tree.

    Args:
        text: JSON document.
        strict: When False, unknown classification labels are dropped
            instead of rejected.

    Returns:
        Node: Reconstructed tree root.

    Raises:
        FormatError: On malformed JSON or a document not shaped like a tree.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise FormatError(f"Malformed tree JSON: {e}") from e
    return node_from_dict(data, strict=strict)


def node_from_dict(data: Any, *, strict: bool = True, _where: str = "$") -> Node:
    """Build a node from a decoded JSON value."""
    if not isinstance(data, Mapping):
        raise FormatError(f"Tree node at {_where} must be an object.")

    kind = _parse_kind(data.get("type"), _where)

    name = data.get("name", "")
    path = data.get("path", "")
    if not isinstance(name, str) or not isinstance(path, str):
        raise FormatError(f"Tree node at {_where} has non-string name or path.")

    node = Node(
        kind=kind,
        name=name,
        path=path,
        classification=_parse_classification(data.get("classification"), strict, _where),
        size=_parse_size(data.get("size"), kind, strict, _where),
    )

    raw_children = data.get("children", data.get("contents"))
    if raw_children is not None:
        if not isinstance(raw_children, list):
            raise FormatError(f"Children of node at {_where} must be a list.")
        node.children = _parse_children(raw_children, strict, _where)
    return node


def _parse_children(raw: List[Any], strict: bool, where: str) -> List[Node]:
    return [
        node_from_dict(child, strict=strict, _where=f"{where}.children[{i}]")
        for i, child in enumerate(raw)
    ]


def _parse_kind(raw: Any, where: str) -> NodeKind:
    try:
        return NodeKind(raw)
    except ValueError as e:
        raise FormatError(f"Unknown node type {raw!r} at {where}.") from e


def _parse_classification(raw: Any, strict: bool, where: str) -> Optional[Classification]:
    if raw is None or raw == "":
        return None
    try:
        return Classification(str(raw).strip().lower())
    except ValueError as e:
        if strict:
            raise FormatError(f"Unknown classification {raw!r} at {where}.") from e
        return None


def _parse_size(raw: Any, kind: NodeKind, strict: bool, where: str) -> Optional[int]:
    if raw is None or kind is NodeKind.DIRECTORY:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        if not strict:
            return None
        raise FormatError(f"Size at {where} must be an integer.")
    return raw
