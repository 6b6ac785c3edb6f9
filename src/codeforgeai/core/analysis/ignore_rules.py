from __future__ import annotations

"""
Ignore Rule Engine.

Parses .gitignore-style pattern files and decides whether a path relative
to the project root is excluded. Patterns are translated to anchored regular
expressions evaluated against "/"-separated path segments.

Supported syntax:
  - blank lines and "#" comments are skipped ("\\#" and "\\!" escape them)
  - "!" negates a pattern (re-includes a previously excluded path)
  - a trailing "/" restricts the pattern to directories
  - a "/" anywhere else anchors the pattern to the root; otherwise the
    pattern matches the basename at any depth
  - "*" and "?" never cross "/"; "**" spans any number of segments
  - "[...]" character classes ("[!...]" negated)

The last matching rule wins, and a path is excluded whenever one of its
ancestor directories is excluded.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from codeforgeai.domain.constants import IGNORE_FILENAME

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# RULE MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class IgnoreRule:
    """
    One compiled ignore pattern.

    Attributes:
        pattern: Raw pattern text as read from the file.
        regex: Compiled full-path matcher.
        negated: Whether the rule re-includes matching paths.
        dir_only: Whether the rule applies to directories only.
    """
    pattern: str
    regex: re.Pattern
    negated: bool = False
    dir_only: bool = False


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Ordered, immutable collection of rules loaded for one tree build."""
    rules: Tuple[IgnoreRule, ...] = ()
    source: str = ""

    def __iter__(self) -> Iterator[IgnoreRule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    @property
    def patterns(self) -> List[str]:
        return [r.pattern for r in self.rules]


RuleInput = Union[IgnoreRuleSet, Iterable[str]]

# -----------------------------------------------------------------------------
# LOADING & COMPILATION
# -----------------------------------------------------------------------------

def load_ignore_rules(root_dir: str, filename: str = IGNORE_FILENAME) -> IgnoreRuleSet:
    """
    Read the ignore file located at the root directory.

    A missing or unreadable file yields an empty rule set rather than an error.

    Args:
        root_dir: Directory expected to contain the ignore file.
        filename: Ignore file name.

    Returns:
        IgnoreRuleSet: Compiled rules in file order.
    """
    ignore_path = os.path.join(root_dir, filename)
    if not os.path.isfile(ignore_path):
        return IgnoreRuleSet(source=ignore_path)

    try:
        with open(ignore_path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.readlines()
    except OSError as e:
        logger.warning(f"Unable to read ignore file '{ignore_path}': {e}")
        return IgnoreRuleSet(source=ignore_path)

    rule_set = compile_rules(lines, source=ignore_path)
    logger.debug(f"Loaded {len(rule_set)} ignore rules from {ignore_path}")
    return rule_set


def compile_rules(lines: Iterable[str], source: str = "") -> IgnoreRuleSet:
    """
    Compile raw pattern lines, silently dropping blanks and comments.

    Args:
        lines: Raw pattern strings.
        source: Optional origin used for diagnostics.

    Returns:
        IgnoreRuleSet: Compiled rules in input order.
    """
    compiled: List[IgnoreRule] = []
    for line in lines:
        rule = parse_rule(line)
        if rule is not None:
            compiled.append(rule)
    return IgnoreRuleSet(rules=tuple(compiled), source=source)


def parse_rule(line: str) -> Optional[IgnoreRule]:
    """
    Translate a single pattern line into an IgnoreRule.

    Args:
        line: Raw pattern text.

    Returns:
        Optional[IgnoreRule]: None for blank, comment or empty patterns.
    """
    text = line.strip()
    if not text or text.startswith("#"):
        return None

    negated = False
    if text.startswith("!"):
        negated = True
        text = text[1:]
    elif text.startswith("\\#") or text.startswith("\\!"):
        text = text[1:]

    dir_only = text.endswith("/")
    text = text.rstrip("/")

    # A separator left in the body anchors the pattern to the root
    anchored = "/" in text
    text = text.lstrip("/")
    if not text:
        return None

    try:
        regex = re.compile(_glob_to_regex(text, anchored))
    except re.error as e:
        logger.debug(f"Skipping invalid ignore pattern '{line.strip()}': {e}")
        return None

    return IgnoreRule(pattern=line.strip(), regex=regex, negated=negated, dir_only=dir_only)

# -----------------------------------------------------------------------------
# MATCHING
# -----------------------------------------------------------------------------

def matches(relative_path: str, rules: RuleInput, is_dir: Optional[bool] = None) -> bool:
    """
    Decide whether a root-relative path is excluded.

    Args:
        relative_path: Path relative to the project root ("/" or os.sep separated).
        rules: Compiled rule set, or raw pattern strings.
        is_dir: Whether the path is a directory. None means unknown, in which
            case directory-only rules still apply.

    Returns:
        bool: True if the path (or one of its ancestors) is excluded.
    """
    if isinstance(rules, str):
        rules = [rules]
    rule_set = rules if isinstance(rules, IgnoreRuleSet) else compile_rules(rules)
    if not rule_set.rules:
        return False

    path = relative_path.replace(os.sep, "/").strip("/")
    if not path or path == ".":
        return False

    parts = path.split("/")
    for depth in range(1, len(parts) + 1):
        candidate = "/".join(parts[:depth])
        candidate_is_dir = True if depth < len(parts) else is_dir
        if _is_excluded(candidate, candidate_is_dir, rule_set):
            return True
    return False


def _is_excluded(path: str, is_dir: Optional[bool], rule_set: IgnoreRuleSet) -> bool:
    """Apply last-match-wins evaluation to a single path."""
    excluded = False
    for rule in rule_set:
        if rule.dir_only and is_dir is False:
            continue
        if rule.regex.match(path):
            excluded = not rule.negated
    return excluded

# -----------------------------------------------------------------------------
# GLOB TRANSLATION
# -----------------------------------------------------------------------------

def _glob_to_regex(pattern: str, anchored: bool) -> str:
    """
    Translate a slash-separated glob into a full-match regex.

    Args:
        pattern: Glob without leading or trailing separators.
        anchored: Whether the pattern is tied to the root.

    Returns:
        str: Regular expression source.
    """
    segments = pattern.split("/")
    body: List[str] = []
    last_index = len(segments) - 1

    for i, segment in enumerate(segments):
        if segment == "**":
            body.append(".*" if i == last_index else "(?:.*/)?")
            continue
        body.append(_segment_to_regex(segment))
        if i != last_index:
            body.append("/")

    prefix = "" if anchored else "(?:.*/)?"
    return "^" + prefix + "".join(body) + "$"


def _segment_to_regex(segment: str) -> str:
    """Translate one path segment; wildcards never match a separator."""
    out: List[str] = []
    i = 0
    n = len(segment)
    while i < n:
        c = segment[i]
        if c == "*":
            while i + 1 < n and segment[i + 1] == "*":
                i += 1
            out.append("[^/]*")
        elif c == "?":
            out.append("[^/]")
        elif c == "[":
            end = segment.find("]", i + 2 if i + 1 < n and segment[i + 1] in "!^" else i + 1)
            if end == -1:
                out.append(re.escape(c))
            else:
                content = segment[i + 1:end]
                if content[:1] in ("!", "^"):
                    content = "^" + content[1:]
                out.append("[" + content.replace("\\", "\\\\") + "]")
                i = end
        elif c == "\\" and i + 1 < n:
            i += 1
            out.append(re.escape(segment[i]))
        else:
            out.append(re.escape(c))
        i += 1
    return "".join(out)
