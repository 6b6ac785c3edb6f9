from __future__ import annotations

"""
CLI Argument Definition.

Defines the command-line schema: global logging switches plus one
subcommand per assistant operation.
"""

import argparse

from codeforgeai import __version__

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the CodeforgeAI CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="codeforgeai",
        description="Local developer assistant backed by language models.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    # --- Logging ---
    verbosity = p.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log progress messages (INFO).",
    )
    verbosity.add_argument(
        "-V", "--very-verbose", "--debug",
        dest="debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this file.",
    )
    p.add_argument(
        "--save-log",
        action="store_true",
        help="Write logs to the default file under ~/.codeforgeai/logs.",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- Analysis ---
    sub.add_parser(
        "analyze",
        help="Classify the current directory and save the result to .codeforge.json.",
    )
    strip = sub.add_parser(
        "strip",
        help="Print the ignore-pruned directory tree of the current directory.",
    )
    strip.add_argument(
        "--labels",
        action="store_true",
        help="Show classifications from the last analysis next to each entry.",
    )

    # --- Generation ---
    prompt = sub.add_parser("prompt", help="Answer a prompt with code or a shell command.")
    prompt.add_argument("text", nargs="+", help="Prompt text.")

    commit = sub.add_parser(
        "commit-message",
        help="Generate a commit message for the staged (or unstaged) git diff.",
    )
    commit.add_argument(
        "--diff-file",
        dest="diff_file",
        default=None,
        help="Read the diff from a file instead of git.",
    )

    edit = sub.add_parser("edit", help="Edit files into sibling .codeforgedit files.")
    edit.add_argument("paths", nargs="+", help="Files or directories to edit.")
    edit.add_argument(
        "--user-prompt",
        dest="user_prompt",
        required=True,
        help="Description of the requested change.",
    )
    edit.add_argument(
        "--allow-ignore",
        action="store_true",
        help="Edit targets even if they match .gitignore.",
    )
    edit.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the edit manifest as JSON.",
    )

    explain = sub.add_parser("explain", help="Explain the code in a file.")
    explain.add_argument("file", help="File to explain.")

    suggestion = sub.add_parser("suggestion", help="Suggest code for a file region or a snippet.")
    suggestion.add_argument("--file", dest="file", default="", help="Source file.")
    suggestion.add_argument("--line", dest="line", type=int, default=0, help="1-based line number.")
    suggestion.add_argument(
        "--entire",
        action="store_true",
        help="Use the whole file as context.",
    )
    suggestion.add_argument(
        "--snippet",
        dest="snippet",
        nargs="+",
        default=None,
        help="Code lines to use instead of a file.",
    )

    # --- Configuration ---
    config = sub.add_parser("config", help="Ensure the configuration file exists and is complete.")
    config.add_argument(
        "--dump",
        action="store_true",
        help="Print the effective configuration as JSON.",
    )

    models = sub.add_parser("models", help="List the models published in the GitHub Models catalog.")
    models.add_argument(
        "--token",
        dest="token",
        default=None,
        help="GitHub token (defaults to the GITHUB_TOKEN environment variable).",
    )

    return p


def resolve_log_level(args: argparse.Namespace) -> str:
    """Map the verbosity switches to a logging level name."""
    if args.debug:
        return "DEBUG"
    if args.verbose:
        return "INFO"
    return "WARNING"
