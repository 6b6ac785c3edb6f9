from __future__ import annotations

"""
Unit tests for the CLI layer.

Verifies:
1. Subcommand and flag parsing.
2. Verbosity mapping to logging levels.
3. Dispatch to the Engine and exit codes.
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from codeforgeai.domain.pipeline_models import AnalysisResult, EditManifest, EditOutcome
from codeforgeai.interface.cli import app
from codeforgeai.interface.cli.args import build_parser, resolve_log_level


def parse_args(arg_list):
    """Helper to simulate CLI argument parsing."""
    return build_parser().parse_args(arg_list)

# -----------------------------------------------------------------------------
# ARGUMENT PARSING
# -----------------------------------------------------------------------------

def test_edit_arguments() -> None:
    """TC-01: Edit accepts several paths, a prompt and the ignore override."""
    args = parse_args(["edit", "a.py", "src", "--user-prompt", "add docs", "--allow-ignore"])

    assert args.command == "edit"
    assert args.paths == ["a.py", "src"]
    assert args.user_prompt == "add docs"
    assert args.allow_ignore is True


def test_edit_requires_user_prompt() -> None:
    """TC-02: Missing --user-prompt is a usage error."""
    with pytest.raises(SystemExit) as exc:
        parse_args(["edit", "a.py"])
    assert exc.value.code == 2


def test_suggestion_arguments() -> None:
    """TC-03: Suggestion options are typed."""
    args = parse_args(["suggestion", "--file", "x.py", "--line", "12"])
    assert args.file == "x.py" and args.line == 12 and args.entire is False
    assert parse_args(["suggestion", "--snippet", "a = 1", "b = 2"]).snippet == ["a = 1", "b = 2"]


@pytest.mark.parametrize(
    "flags,level",
    [([], "WARNING"), (["-v"], "INFO"), (["-V"], "DEBUG"), (["--debug"], "DEBUG"), (["--very-verbose"], "DEBUG")],
)
def test_verbosity_levels(flags, level) -> None:
    """TC-04: Verbosity switches map to logging levels."""
    assert resolve_log_level(parse_args(flags + ["strip"])) == level


def test_command_is_required() -> None:
    """TC-05: Running without a subcommand is a usage error."""
    with pytest.raises(SystemExit):
        parse_args([])

# -----------------------------------------------------------------------------
# DISPATCH & EXIT CODES
# -----------------------------------------------------------------------------

def test_analyze_success(capsys) -> None:
    """TC-06: A successful analysis prints the result path."""
    engine = MagicMock()
    engine.run_analysis.return_value = AnalysisResult(ok=True, result_path="/p/.codeforge.json")

    assert app.main(["analyze"], engine=engine) == 0
    assert "/p/.codeforge.json" in capsys.readouterr().out


def test_analyze_failure_exit_code(capsys) -> None:
    """TC-07: A failed analysis exits with 1 and names the stage."""
    engine = MagicMock()
    engine.run_analysis.return_value = AnalysisResult(ok=False, failed_stage="classify", error="x")

    assert app.main(["analyze"], engine=engine) == 1
    assert "classify" in capsys.readouterr().err


def test_prompt_joins_words(capsys) -> None:
    """TC-08: Prompt words are joined and the answer printed."""
    engine = MagicMock()
    engine.process_prompt.return_value = "ls -la"

    assert app.main(["prompt", "list", "all", "files"], engine=engine) == 0
    engine.process_prompt.assert_called_once_with("list all files")
    assert capsys.readouterr().out.strip() == "ls -la"


def test_empty_answer_is_failure() -> None:
    """TC-09: An empty pipeline result exits with 1."""
    engine = MagicMock()
    engine.process_prompt.return_value = ""
    assert app.main(["prompt", "x"], engine=engine) == 1


def test_commit_message_from_diff_file(tmp_path: Path, capsys) -> None:
    """TC-10: --diff-file feeds the diff directly to the pipeline."""
    diff = tmp_path / "change.diff"
    diff.write_text("diff body", encoding="utf-8")
    engine = MagicMock()
    engine.process_commit_message.return_value = "✨ add thing"

    assert app.main(["commit-message", "--diff-file", str(diff)], engine=engine) == 0
    engine.process_commit_message.assert_called_once_with("diff body")
    assert "✨ add thing" in capsys.readouterr().out


def test_edit_json_manifest(capsys) -> None:
    """TC-11: Partial edit failures exit with 1 and report each file."""
    manifest = EditManifest([
        EditOutcome(path="a.py", ok=True, output_path="a.py.codeforgedit"),
        EditOutcome(path="b.py", ok=False, error="timeout"),
    ])
    engine = MagicMock()
    engine.edit_files.return_value = manifest

    assert app.main(["edit", "a.py", "b.py", "--user-prompt", "x", "--json"], engine=engine) == 1
    engine.edit_files.assert_called_once_with(["a.py", "b.py"], "x", allow_ignore=False)
    report = json.loads(capsys.readouterr().out)
    assert report["failed"] == [{"path": "b.py", "error": "timeout"}]


def test_explain_missing_file_is_usage_error(tmp_path: Path) -> None:
    """TC-12: Explaining a missing file exits with 2 without calling the Engine."""
    engine = MagicMock()
    assert app.main(["explain", str(tmp_path / "nope.py")], engine=engine) == 2
    engine.explain_code.assert_not_called()


def test_keyboard_interrupt_exit_code() -> None:
    """TC-13: Ctrl+C maps to exit code 130."""
    engine = MagicMock()
    engine.render_project_tree.side_effect = KeyboardInterrupt
    assert app.main(["strip"], engine=engine) == 130


def test_config_dump(tmp_path: Path, capsys) -> None:
    """TC-14: 'config --dump' creates the file and prints its JSON."""
    cfg_path = tmp_path / "cfg.json"
    with patch.dict("os.environ", {"CODEFORGEAI_CONFIG": str(cfg_path)}):
        assert app.main(["config", "--dump"], engine=MagicMock()) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["integrations"]["default"] == "ollama"
    assert cfg_path.exists()


def test_config_malformed_is_usage_error(tmp_path: Path) -> None:
    """TC-15: A malformed config file is reported, not silently replaced."""
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text("{oops", encoding="utf-8")
    with patch.dict("os.environ", {"CODEFORGEAI_CONFIG": str(cfg_path)}):
        assert app.main(["config"], engine=MagicMock()) == 2
    assert cfg_path.read_text(encoding="utf-8") == "{oops"


def test_strip_labels_flag(capsys) -> None:
    """TC-16: 'strip --labels' asks the Engine for a labelled tree."""
    engine = MagicMock()
    engine.render_project_tree.return_value = ["proj/", "└── a.py [useful]"]

    assert app.main(["strip", "--labels"], engine=engine) == 0
    engine.render_project_tree.assert_called_once_with(show_labels=True)
    assert "a.py [useful]" in capsys.readouterr().out


def test_models_command(capsys) -> None:
    """TC-17: 'models' prints one catalog id per line; an empty list exits with 1."""
    engine = MagicMock()
    engine.list_hosted_models.return_value = ["openai/gpt-4o", "meta/llama"]

    assert app.main(["models", "--token", "tok"], engine=engine) == 0
    engine.list_hosted_models.assert_called_once_with(token="tok")
    assert capsys.readouterr().out.split() == ["openai/gpt-4o", "meta/llama"]

    engine.list_hosted_models.return_value = []
    assert app.main(["models"], engine=engine) == 1
