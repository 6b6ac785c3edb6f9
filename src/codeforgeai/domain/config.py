from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of model names, prompt templates and backend
integration flags using a single JSON document. Every top-level operation
loads a fresh immutable snapshot, so edits made to the file between two
invocations take effect immediately.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from codeforgeai.domain.constants import CONFIG_ENV_VAR, CONFIG_FILENAME
from codeforgeai.domain.errors import ConfigError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
DEFAULT_PROVIDER = "ollama"

DEFAULT_PROMPTS: Dict[str, str] = {
    "general_prompt": (
        "based on the below prompt and without returning anything else, restructure it so that "
        "it is strictly understandable to a coding ai agent with json output for file changes:"
    ),
    "code_prompt": "in very clear, concise manner, solve the below request:",
    "directory_classification_prompt": (
        "Given the complete tree structure below as valid JSON, recursively process every single "
        "file and directory (based on its relative path) that is present. For each node, assign "
        "exactly one classification: 'useful' for files and directories that developers interact "
        "with, 'useless' for build, template, or temporary files and directories, and 'source' for "
        "source control or related files. For every node, return an object with the keys: 'type' "
        "(either 'file' or 'directory'), 'name', 'path', 'children' (an array of child entries for "
        "directories), and a new key 'classification' that holds one of 'useful', 'useless', or "
        "'source'. Ensure every file and directory from the input is included exactly once with one "
        "classification. Return only valid JSON with this structure and nothing else."
    ),
    "gitmoji_prompt": (
        "reply only with a single emoji character that best fits the below commit message, "
        "and nothing else."
    ),
    "commit_message_prompt": (
        "Generate a very short and very concise, one sentence commit message for these code "
        "changes, and nothing else. "
    ),
    "edit_finetune_prompt": (
        "edit this code according to the below prompt and return nothing but the edited code"
    ),
    "code_or_command": (
        "reply with either code or command only; is the below request best satisfied with a "
        "code response or command response:"
    ),
    "command_agent_prompt": (
        "one for each line and nothing else, return a list of commands that can be executed to "
        "achieve the below request, and nothing else:"
    ),
    "prompt_finetune_prompt": (
        "in a clear and concise manner, rephrase the following prompt to be more understandable "
        "to a coding ai agent, return the rephrased prompt and nothing else"
    ),
    "language_classification_prompt": (
        "in one word only, what programming language is used in this project tree structure"
    ),
    "readme_summary_prompt": (
        "in one short sentence only, generate a concise summary of this text below, and nothing else"
    ),
    "specific_file_classification": (
        "taking the path and content of this file and classify it into either only user code "
        "file or project code file or source control file"
    ),
    "improve_code_prompt": (
        "given this block of code, improve the code generally and return nothing but the improved code:"
    ),
    "explain_code_prompt": "explain the following code in a clear and concise manner",
    "suggestion_prompt": "provide a helpful code suggestion for the following code context:",
    "extract_code_blocks_prompt": (
        "extract all code blocks from the following text and return them in a structured format:"
    ),
    "format_code_prompt": (
        "format the following code for better readability while preserving functionality:"
    ),
}

DEFAULT_INTEGRATIONS: Dict[str, Any] = {
    "ollama": {"enabled": True},
    "githubmodels": {"enabled": False},
    "openapi": {"enabled": False},
    "githubcopilot": {"enabled": False},
    "default": DEFAULT_PROVIDER,
}

PromptSet = Mapping[str, str]

# -----------------------------------------------------------------------------
# Configuration Model
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class AppConfig:
    """
    Immutable configuration snapshot for one top-level operation.

    Attributes:
        general_model: Local model name used for the "general" role.
        code_model: Local model name used for the "code" role.
        general_model_github: Hosted model id for the "general" role.
        code_model_github: Hosted model id for the "code" role.
        debug: Verbose diagnostics flag.
        format_line_separator: Blank lines between formatted code blocks.
        prompts: Read-only mapping of template name to template text.
        integrations: Backend enablement flags and the default provider name.
    """
    general_model: str = "gemma3:1b"
    code_model: str = "qwen2.5-coder:1.5b"
    general_model_github: str = ""
    code_model_github: str = ""
    debug: bool = False
    format_line_separator: int = 5
    prompts: PromptSet = field(default_factory=lambda: MappingProxyType(dict(DEFAULT_PROMPTS)))
    integrations: Mapping[str, Any] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_INTEGRATIONS))
    )

    @property
    def provider(self) -> str:
        """Name of the backend answering model calls."""
        return str(self.integrations.get("default") or DEFAULT_PROVIDER)

    def prompt(self, name: str) -> str:
        """Return a template, falling back to the built-in default."""
        return self.prompts.get(name) or DEFAULT_PROMPTS.get(name, "")

    def model_name(self, role: str, github: bool = False) -> str:
        """Resolve the configured model name for a role ("general" or "code")."""
        if github:
            return self.code_model_github if role == "code" else self.general_model_github
        return self.code_model if role == "code" else self.general_model


_SCALAR_KEYS = (
    "general_model",
    "code_model",
    "general_model_github",
    "code_model_github",
    "debug",
    "format_line_separator",
)

# -----------------------------------------------------------------------------
# Path Resolution
# -----------------------------------------------------------------------------

def get_config_path() -> str:
    """
    Resolve the configuration file location.

    Honors the CODEFORGEAI_CONFIG environment variable, otherwise uses
    ~/.codeforgeai.json (or the working directory when no home is available).
    """
    override = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return os.path.abspath(os.path.expanduser(override))

    home = os.path.expanduser("~")
    if not home or home == "~":
        return os.path.abspath(CONFIG_FILENAME)
    return os.path.join(home, CONFIG_FILENAME)

# -----------------------------------------------------------------------------
# Conversion
# -----------------------------------------------------------------------------

def config_to_dict(cfg: AppConfig) -> Dict[str, Any]:
    """Flatten a snapshot into the on-disk JSON layout."""
    data: Dict[str, Any] = {key: getattr(cfg, key) for key in _SCALAR_KEYS}
    data.update(dict(cfg.prompts))
    data["integrations"] = json.loads(json.dumps(dict(cfg.integrations)))
    return data


def config_from_dict(data: Mapping[str, Any]) -> AppConfig:
    """
    Build a snapshot from a (possibly partial) JSON document.

    Unknown keys are ignored; missing keys take their default value.
    """
    defaults = AppConfig()
    values: Dict[str, Any] = {}
    for key in _SCALAR_KEYS:
        values[key] = data.get(key, getattr(defaults, key))

    prompts = dict(DEFAULT_PROMPTS)
    for name in DEFAULT_PROMPTS:
        raw = data.get(name)
        if isinstance(raw, str) and raw:
            prompts[name] = raw

    integrations = json.loads(json.dumps(DEFAULT_INTEGRATIONS))
    raw_integrations = data.get("integrations")
    if isinstance(raw_integrations, dict):
        integrations.update(raw_integrations)
        if not integrations.get("default"):
            integrations["default"] = DEFAULT_PROVIDER

    return AppConfig(
        prompts=MappingProxyType(prompts),
        integrations=MappingProxyType(integrations),
        **values,
    )


def _needs_completion(data: Mapping[str, Any]) -> bool:
    """Detect documents missing prompt templates or a default provider."""
    for name in DEFAULT_PROMPTS:
        if not data.get(name):
            return True
    integrations = data.get("integrations")
    return not isinstance(integrations, dict) or not integrations.get("default")

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------

def load_config(path: Optional[str] = None, *, strict: bool = False) -> AppConfig:
    """
    Load a fresh configuration snapshot from disk.

    Missing files are created with defaults. Malformed documents (bad JSON
    or bytes that are not UTF-8) are
    replaced by defaults (and the defaults persisted) unless strict mode is
    requested. Documents lacking prompt templates or a default provider are
    completed and written back.

    Args:
        path: Optional explicit file path; defaults to get_config_path().
        strict: Raise ConfigError on malformed JSON instead of recovering.

    Returns:
        AppConfig: Immutable configuration snapshot.

    Raises:
        ConfigError: If an existing file cannot be read, or if it is malformed
            and strict is True.
    """
    config_path = path or get_config_path()

    if not os.path.exists(config_path):
        logger.debug(f"Config file not found at {config_path}. Writing defaults.")
        cfg = AppConfig()
        save_config(cfg, config_path)
        return cfg

    raw_text = ""
    problem = ""
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_text = f.read()
    except UnicodeDecodeError as e:
        problem = f"Configuration file '{config_path}' is not valid UTF-8: {e}"
    except OSError as e:
        raise ConfigError(f"Cannot read configuration file '{config_path}': {e}") from e

    data: Any = None
    if not problem:
        try:
            data = json.loads(raw_text)
        except ValueError as e:
            problem = f"Malformed configuration file '{config_path}': {e}"
        else:
            if not isinstance(data, dict):
                problem = f"Configuration root must be an object in '{config_path}'."

    if problem:
        if strict:
            raise ConfigError(problem)
        logger.error(f"{problem} Resetting to defaults.")
        cfg = AppConfig()
        save_config(cfg, config_path)
        return cfg

    cfg = config_from_dict(data)
    if _needs_completion(data):
        logger.info("Configuration incomplete. Filling missing prompts and integrations.")
        save_config(cfg, config_path)
    return cfg


def save_config(cfg: AppConfig, path: Optional[str] = None) -> bool:
    """
    Persist a configuration snapshot to disk.

    Args:
        cfg: Snapshot to write.
        path: Optional explicit file path; defaults to get_config_path().

    Returns:
        bool: True if the file was written.
    """
    config_path = path or get_config_path()
    try:
        parent = os.path.dirname(os.path.abspath(config_path))
        os.makedirs(parent, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config_to_dict(cfg), f, ensure_ascii=False, indent=2)
        logger.debug(f"Configuration saved to {config_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False
