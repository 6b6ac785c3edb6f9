from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. A scripted in-memory Model and an Engine wired to it.
3. A small sample project on disk.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from codeforgeai.core.models.base import Model  # noqa: E402
from codeforgeai.core.models.registry import ModelRegistry  # noqa: E402
from codeforgeai.core.pipeline.engine import Engine  # noqa: E402
from codeforgeai.domain.config import AppConfig  # noqa: E402

Reply = Callable[[str, Mapping[str, Any]], str]


# -----------------------------------------------------------------------------
# Fake Backend
# -----------------------------------------------------------------------------
class ScriptedModel(Model):
    """
    In-memory Model answering per operation tag.

    Replies may be strings, callables (prompt, metadata) -> str, or
    exceptions which are raised. Every call is recorded in `calls`.
    """

    def __init__(self, role: str, replies: Dict[str, Any], calls: List[Tuple[str, str, Dict[str, Any]]]):
        self.model_name = f"fake-{role}"
        self.role = role
        self._replies = replies
        self._calls = calls

    def send_request(self, prompt: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
        meta = dict(metadata or {})
        self._calls.append((self.role, prompt, meta))
        reply = self._replies.get(meta.get("operation", ""), "")
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            return reply(prompt, meta)
        return reply


class FakeBackend:
    """Registry plus the shared call log of the scripted models."""

    def __init__(self) -> None:
        self.replies: Dict[str, Any] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self.registry = ModelRegistry()
        self.registry.register("ollama", self._factory)

    def _factory(self, cfg: AppConfig, role: str) -> Model:
        return ScriptedModel(role, self.replies, self.calls)

    def operations(self) -> List[str]:
        return [meta.get("operation", "") for _, _, meta in self.calls]


@pytest.fixture
def backend() -> FakeBackend:
    """Scripted backend registered under the default provider name."""
    return FakeBackend()


@pytest.fixture
def engine_factory(backend: FakeBackend) -> Callable[..., Engine]:
    """Build Engines bound to the fake backend and a default config snapshot."""

    def _make(cwd: Path, config: Optional[AppConfig] = None) -> Engine:
        cfg = config or AppConfig()
        return Engine(config_loader=lambda: cfg, registry=backend.registry, cwd=str(cwd))

    return _make


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """
    Create a small project:

        project/
        ├── .gitignore      (build/, *.log)
        ├── main.py
        ├── README.md
        ├── app.log
        ├── build/out.bin
        └── pkg/util.py
    """
    root = tmp_path / "project"
    (root / "pkg").mkdir(parents=True)
    (root / "build").mkdir()
    (root / ".gitignore").write_text("build/\n*.log\n", encoding="utf-8")
    (root / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "README.md").write_text("# Demo\n", encoding="utf-8")
    (root / "app.log").write_text("noise\n", encoding="utf-8")
    (root / "build" / "out.bin").write_bytes(b"\x00\x01")
    (root / "pkg" / "util.py").write_text("def f():\n    return 1\n", encoding="utf-8")
    return root
