from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides path resolution, text I/O and directory helpers used by the
pipelines. Every failure is raised as FileSystemError so callers can scope
the damage to a single file or subtree.
"""

import os
from typing import Optional

from codeforgeai.domain.constants import APP_DIR_NAME
from codeforgeai.domain.errors import FileSystemError

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the per-user application data directory (~/.codeforgeai).

    On Windows %LOCALAPPDATA% is preferred. The directory is created on
    demand; creation failures are ignored.

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, "CodeforgeAI")

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, APP_DIR_NAME) if home and home != "~" else APP_DIR_NAME

    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))


def relative_to(path: str, root: str) -> str:
    """
    Express a path relative to root using "/" separators.

    Paths on another drive, or outside root, are returned as given so they
    never match root-anchored ignore rules by accident.
    """
    try:
        rel = os.path.relpath(os.path.abspath(path), os.path.abspath(root))
    except ValueError:
        return path
    if rel == "." or rel.startswith(".."):
        return "" if rel == "." else path
    return rel.replace(os.sep, "/")

# -----------------------------------------------------------------------------
# TEXT I/O API
# -----------------------------------------------------------------------------

def read_text_file(path: str) -> str:
    """
    Read a whole file as UTF-8 text (undecodable bytes replaced).

    Raises:
        FileSystemError: If the file is missing or unreadable.
    """
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        raise FileSystemError(f"Cannot read '{path}': {e.strerror or e}", path) from e


def write_text_file(path: str, content: str) -> str:
    """
    Write text to a file, replacing previous content.

    Returns:
        str: The written path.

    Raises:
        FileSystemError: If the file cannot be written.
    """
    try:
        parent = os.path.dirname(os.path.abspath(path))
        os.makedirs(parent, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path
    except OSError as e:
        raise FileSystemError(f"Cannot write '{path}': {e.strerror or e}", path) from e
