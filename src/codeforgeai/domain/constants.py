from __future__ import annotations

"""
Domain Constants.

Fixed filenames, markers and operation tags shared across the application.
"""

from typing import Final

# -----------------------------------------------------------------------------
# FILESYSTEM CONVENTIONS
# -----------------------------------------------------------------------------
IGNORE_FILENAME: Final[str] = ".gitignore"
ANALYSIS_RESULT_FILENAME: Final[str] = ".codeforge.json"
EDIT_SUFFIX: Final[str] = ".codeforgedit"
CONFIG_FILENAME: Final[str] = ".codeforgeai.json"
CONFIG_ENV_VAR: Final[str] = "CODEFORGEAI_CONFIG"

APP_DIR_NAME: Final[str] = ".codeforgeai"
LOG_FILENAME: Final[str] = "codeforgeai.log"

# -----------------------------------------------------------------------------
# PIPELINE CONSTANTS
# -----------------------------------------------------------------------------
DEFAULT_GITMOJI: Final[str] = "✨"
DEFAULT_RESPONSE_TYPE: Final[str] = "code"
COMMAND_MARKER: Final[str] = "command"
SUGGESTION_CONTEXT_LINES: Final[int] = 5
NO_SUGGESTION_CONTENT: Final[str] = "No content provided for suggestion"

# -----------------------------------------------------------------------------
# MODEL ROLES
# -----------------------------------------------------------------------------
ROLE_GENERAL: Final[str] = "general"
ROLE_CODE: Final[str] = "code"
