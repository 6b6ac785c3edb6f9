from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, command dispatch to the
Engine, and result rendering. Exit codes: 0 success, 1 operation failure,
2 invalid input or unusable configuration, 130 interrupted.
"""

import argparse
import json
import os
import sys
from typing import Callable, Dict, List, Optional

from codeforgeai.core.pipeline.engine import Engine
from codeforgeai.domain.config import config_to_dict, get_config_path, load_config
from codeforgeai.domain.errors import CodeforgeError, ConfigError
from codeforgeai.domain.pipeline_models import EditManifest
from codeforgeai.infra.fs import normalize_path, read_text_file
from codeforgeai.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from codeforgeai.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None, engine: Optional[Engine] = None) -> int:
    """
    Execute the CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.
        engine: Pre-built Engine (mainly for tests).

    Returns:
        int: Process exit code.
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console stderr, optional file)
    log_file = None
    if args.log_file or args.save_log:
        log_file = normalize_path(args.log_file, get_default_log_path())
    logging_conf = LoggingConfig(
        level=cli_args.resolve_log_level(args),
        console=True,
        log_file=log_file,
    )
    configure_logging(logging_conf)
    logger.debug(f"CLI execution initiated: command '{args.command}'.")

    # 3. Dispatch
    handler = _COMMANDS[args.command]
    try:
        return handler(args, engine or Engine(cwd=os.getcwd()))
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except ConfigError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE
    except CodeforgeError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_FAILURE

# -----------------------------------------------------------------------------
# COMMAND HANDLERS
# -----------------------------------------------------------------------------

def _cmd_analyze(args: argparse.Namespace, engine: Engine) -> int:
    result = engine.run_analysis()
    if not result.ok:
        print(f"ERROR: analysis failed at '{result.failed_stage}': {result.error}", file=sys.stderr)
        return EXIT_FAILURE
    print(f"Directory analysis saved to {result.result_path}")
    return EXIT_OK


def _cmd_strip(args: argparse.Namespace, engine: Engine) -> int:
    lines = engine.render_project_tree(show_labels=args.labels)
    if not lines:
        print("ERROR: could not read the current directory.", file=sys.stderr)
        return EXIT_FAILURE
    print("\n".join(lines))
    return EXIT_OK


def _cmd_prompt(args: argparse.Namespace, engine: Engine) -> int:
    return _print_answer(engine.process_prompt(" ".join(args.text)))


def _cmd_commit_message(args: argparse.Namespace, engine: Engine) -> int:
    if args.diff_file:
        if not os.path.isfile(args.diff_file):
            print(f"ERROR: diff file not found: {args.diff_file}", file=sys.stderr)
            return EXIT_USAGE
        return _print_answer(engine.process_commit_message(read_text_file(args.diff_file)))
    return _print_answer(engine.commit_message_for_repo())


def _cmd_edit(args: argparse.Namespace, engine: Engine) -> int:
    manifest = engine.edit_files(args.paths, args.user_prompt, allow_ignore=args.allow_ignore)
    if args.json_output:
        print(json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2))
    else:
        _print_edit_summary(manifest)
    return EXIT_OK if manifest.ok else EXIT_FAILURE


def _cmd_explain(args: argparse.Namespace, engine: Engine) -> int:
    if not os.path.isfile(args.file):
        print(f"ERROR: file not found: {args.file}", file=sys.stderr)
        return EXIT_USAGE
    return _print_answer(engine.explain_code(args.file))


def _cmd_suggestion(args: argparse.Namespace, engine: Engine) -> int:
    if args.file and not os.path.isfile(args.file):
        print(f"ERROR: file not found: {args.file}", file=sys.stderr)
        return EXIT_USAGE
    answer = engine.provide_suggestion(
        file_path=args.file,
        line=args.line,
        snippet=args.snippet,
        entire=args.entire,
    )
    return _print_answer(answer)


def _cmd_config(args: argparse.Namespace, engine: Engine) -> int:
    cfg = load_config(strict=True)
    if args.dump:
        print(json.dumps(config_to_dict(cfg), ensure_ascii=False, indent=2))
    else:
        print(f"Configuration ready at {get_config_path()}")
    return EXIT_OK


def _cmd_models(args: argparse.Namespace, engine: Engine) -> int:
    names = engine.list_hosted_models(token=args.token)
    if not names:
        print("ERROR: could not list hosted models. See the log for details.", file=sys.stderr)
        return EXIT_FAILURE
    print("\n".join(names))
    return EXIT_OK


_COMMANDS: Dict[str, Callable[[argparse.Namespace, Engine], int]] = {
    "analyze": _cmd_analyze,
    "strip": _cmd_strip,
    "prompt": _cmd_prompt,
    "commit-message": _cmd_commit_message,
    "edit": _cmd_edit,
    "explain": _cmd_explain,
    "suggestion": _cmd_suggestion,
    "config": _cmd_config,
    "models": _cmd_models,
}

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_answer(answer: str) -> int:
    if not answer:
        print("ERROR: no response produced. See the log for details.", file=sys.stderr)
        return EXIT_FAILURE
    print(answer)
    return EXIT_OK


def _print_edit_summary(manifest: EditManifest) -> None:
    for outcome in manifest.succeeded:
        print(f"Edited: {outcome.path} -> {outcome.output_path}")
    for outcome in manifest.skipped:
        print(f"Skipped (ignored): {outcome.path}")
    for outcome in manifest.failed:
        print(f"FAILED: {outcome.path}: {outcome.error}", file=sys.stderr)

    print(
        f"Files edited: {len(manifest.succeeded)}, "
        f"failed: {len(manifest.failed)}, skipped: {len(manifest.skipped)}"
    )

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
