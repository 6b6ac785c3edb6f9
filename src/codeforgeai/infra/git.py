from __future__ import annotations

"""
Git Integration.

Thin wrapper around the git executable used to feed the commit-message
pipeline with the current change set.
"""

import logging
import subprocess
from typing import List, Optional

from codeforgeai.domain.errors import GitError

logger = logging.getLogger(__name__)

GIT_TIMEOUT = 30


def get_git_diff(cwd: Optional[str] = None) -> str:
    """
    Return the staged diff, or the unstaged diff when staging fails.

    Args:
        cwd: Repository directory (defaults to the process working directory).

    Returns:
        str: Raw unified diff (possibly empty).

    Raises:
        GitError: If neither diff can be produced.
    """
    try:
        return _run_git(["diff", "--cached"], cwd)
    except GitError as e:
        logger.debug(f"Staged diff unavailable ({e}). Trying unstaged diff.")
    return _run_git(["diff"], cwd)


def _run_git(args: List[str], cwd: Optional[str]) -> str:
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=GIT_TIMEOUT,
            check=True,
        )
    except FileNotFoundError as e:
        raise GitError("git executable not found on PATH.") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(f"git {' '.join(args)} timed out after {GIT_TIMEOUT}s.") from e
    except subprocess.CalledProcessError as e:
        raise GitError(f"git {' '.join(args)} failed: {(e.stderr or '').strip()}") from e
    return proc.stdout
