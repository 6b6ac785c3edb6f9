from __future__ import annotations

"""
Unit tests for the Ignore Rule Engine.

Verifies:
1. Pattern parsing (comments, negation, escapes, directory-only rules).
2. Glob semantics ("*", "?", "**", character classes, anchoring).
3. Last-match-wins evaluation and ancestor exclusion.
4. Loading rules from disk.
"""

from pathlib import Path

import pytest

from codeforgeai.core.analysis.ignore_rules import (
    IgnoreRuleSet,
    compile_rules,
    load_ignore_rules,
    matches,
    parse_rule,
)

# -----------------------------------------------------------------------------
# PARSING
# -----------------------------------------------------------------------------

def test_parse_rule_skips_blank_and_comment_lines() -> None:
    """TC-01: Blank lines and '#' comments produce no rule."""
    assert parse_rule("") is None
    assert parse_rule("   ") is None
    assert parse_rule("# a comment") is None


def test_parse_rule_flags() -> None:
    """TC-02: Negation and trailing-slash markers are recorded."""
    negated = parse_rule("!keep.txt")
    assert negated is not None and negated.negated is True

    dir_only = parse_rule("build/")
    assert dir_only is not None and dir_only.dir_only is True and dir_only.negated is False


def test_escaped_hash_is_a_literal_pattern() -> None:
    """TC-03: '\\#' matches files whose names start with '#'."""
    assert matches("#notes", ["\\#notes"]) is True
    assert matches("notes", ["\\#notes"]) is False


def test_compile_rules_preserves_order() -> None:
    """TC-04: Compiled rules keep file order and drop noise."""
    rule_set = compile_rules(["*.log", "", "# c", "!keep.log"])
    assert rule_set.patterns == ["*.log", "!keep.log"]
    assert len(rule_set) == 2

# -----------------------------------------------------------------------------
# MATCHING SEMANTICS
# -----------------------------------------------------------------------------

def test_directory_rule_matches_directory_path() -> None:
    """TC-05: 'src/generated/' excludes the directory itself."""
    assert matches("src/generated", ["src/generated/"]) is True
    assert matches("src/generated", ["src/generated/"], is_dir=True) is True


def test_directory_rule_does_not_match_plain_file() -> None:
    """TC-06: A directory-only rule never excludes a file of the same name."""
    assert matches("build", ["build/"], is_dir=False) is False
    assert matches("build/out.bin", ["build/"], is_dir=False) is True


def test_basename_glob_matches_at_any_depth() -> None:
    """TC-07: Slash-less patterns apply to the basename anywhere."""
    assert matches("README.md", ["*.md"]) is True
    assert matches("docs/guide/intro.md", ["*.md"]) is True
    assert matches("main.go", ["*.md"]) is False


def test_anchored_pattern_only_matches_from_root() -> None:
    """TC-08: A leading or inner '/' anchors the pattern."""
    assert matches("config.yml", ["/config.yml"]) is True
    assert matches("sub/config.yml", ["/config.yml"]) is False
    assert matches("docs/api.txt", ["docs/*.txt"]) is True
    assert matches("x/docs/api.txt", ["docs/*.txt"]) is False


def test_single_star_does_not_cross_separator() -> None:
    """TC-09: '*' stays inside one segment."""
    assert matches("src/a/b.py", ["src/*.py"]) is False
    assert matches("src/b.py", ["src/*.py"]) is True


def test_double_star_spans_segments() -> None:
    """TC-10: '**' matches zero or more directories."""
    rules = ["a/**/z.txt"]
    assert matches("a/z.txt", rules) is True
    assert matches("a/b/c/z.txt", rules) is True
    assert matches("b/z.txt", rules) is False

    assert matches("logs/deep/file", ["logs/**"]) is True
    assert matches("x/node_modules/pkg", ["**/node_modules"]) is True


@pytest.mark.parametrize(
    "path,expected",
    [
        ("file1.txt", True),
        ("fileA.txt", True),
        ("file10.txt", False),
        ("file/.txt", False),
    ],
)
def test_question_mark_matches_one_character(path: str, expected: bool) -> None:
    """TC-11: '?' matches exactly one non-separator character."""
    assert matches(path, ["file?.txt"]) is expected


def test_character_classes() -> None:
    """TC-12: '[...]' and negated '[!...]' classes."""
    assert matches("a1.tmp", ["a[0-9].tmp"]) is True
    assert matches("ab.tmp", ["a[0-9].tmp"]) is False
    assert matches("ab.tmp", ["a[!0-9].tmp"]) is True


def test_negation_last_match_wins() -> None:
    """TC-13: A later '!' rule re-includes; an even later rule excludes again."""
    assert matches("keep.log", ["*.log", "!keep.log"]) is False
    assert matches("other.log", ["*.log", "!keep.log"]) is True
    assert matches("keep.log", ["*.log", "!keep.log", "keep.*"]) is True


def test_excluded_ancestor_excludes_descendants() -> None:
    """TC-14: Files under an excluded directory stay excluded."""
    assert matches("vendor/lib/x.go", ["vendor"]) is True
    assert matches("vendor/lib/x.go", ["vendor/", "!x.go"]) is True


def test_empty_rules_and_root_path_never_match() -> None:
    """TC-15: No rules, or the root itself, is never excluded."""
    assert matches("anything", IgnoreRuleSet()) is False
    assert matches("", ["*"]) is False
    assert matches(".", ["*"]) is False


def test_single_string_rule_is_accepted() -> None:
    """TC-16: A bare string is treated as a one-rule list."""
    assert matches("x.pyc", "*.pyc") is True

# -----------------------------------------------------------------------------
# LOADING
# -----------------------------------------------------------------------------

def test_load_ignore_rules_reads_file(tmp_path: Path) -> None:
    """TC-17: Rules are read from the root ignore file."""
    (tmp_path / ".gitignore").write_text("# deps\nnode_modules/\n*.md\n", encoding="utf-8")
    rule_set = load_ignore_rules(str(tmp_path))

    assert rule_set.patterns == ["node_modules/", "*.md"]
    assert matches("b.md", rule_set) is True
    assert matches("a.go", rule_set) is False


def test_load_ignore_rules_missing_file_is_empty(tmp_path: Path) -> None:
    """TC-18: A missing ignore file yields an empty rule set."""
    rule_set = load_ignore_rules(str(tmp_path))
    assert len(rule_set) == 0
    assert matches("anything.txt", rule_set) is False
