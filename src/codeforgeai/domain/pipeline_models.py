from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the values exchanged between the Engine, its stages and the
interface layer: model requests, per-stage outcomes, and batch edit
manifests.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")

# -----------------------------------------------------------------------------
# OPERATIONS
# -----------------------------------------------------------------------------

class Operation(str, Enum):
    """Operation tag sent to the backend with every request."""
    DIRECTORY_CLASSIFICATION = "directory_classification"
    PROMPT_FINETUNE = "prompt_finetune"
    CLASSIFY_RESPONSE_TYPE = "classify_response_type"
    COMMAND_GENERATION = "command_generation"
    CODE_GENERATION = "code_generation"
    COMMIT_MESSAGE = "commit_message"
    GITMOJI_SELECTION = "gitmoji_selection"
    FILE_EDIT = "file_edit"
    CODE_EXPLANATION = "code_explanation"
    CODE_SUGGESTION = "code_suggestion"


@dataclass(frozen=True)
class PipelineRequest:
    """
    One composed model call.

    Attributes:
        operation: Operation tag.
        base_prompt: Fully composed prompt text.
        metadata: Extra key/values forwarded to the backend.
    """
    operation: Operation
    base_prompt: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def operation_metadata(self) -> Dict[str, Any]:
        """Metadata mapping as passed to Model.send_request."""
        meta: Dict[str, Any] = {"operation": self.operation.value}
        meta.update(self.metadata)
        return meta

# -----------------------------------------------------------------------------
# STAGE OUTCOMES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class StageResult(Generic[T]):
    """
    Explicit outcome of a single pipeline stage.

    Attributes:
        stage: Stage name used in logs.
        ok: Whether the stage produced a value.
        value: Produced value (None on failure).
        error: The captured exception on failure.
    """
    stage: str
    ok: bool
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, stage: str, value: T) -> "StageResult[T]":
        return cls(stage=stage, ok=True, value=value)

    @classmethod
    def failure(cls, stage: str, error: BaseException) -> "StageResult[T]":
        return cls(stage=stage, ok=False, error=error)

    def value_or(self, default: T) -> T:
        """Return the value, or the given fallback when the stage failed."""
        if self.ok and self.value is not None:
            return self.value
        return default


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of the directory analysis pipeline.

    Attributes:
        ok: True when the classification response was persisted.
        result_path: Absolute path of the written result file.
        failed_stage: Name of the stage that aborted the run.
        error: Human readable error message.
    """
    ok: bool
    result_path: str = ""
    failed_stage: str = ""
    error: str = ""

# -----------------------------------------------------------------------------
# EDIT MANIFEST
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class EditOutcome:
    """Result of editing one file (or skipping one target)."""
    path: str
    ok: bool
    output_path: str = ""
    error: str = ""
    skipped: bool = False


@dataclass
class EditManifest:
    """
    Per-file report of a batch edit.

    Edits are not transactional: some files may be edited while others
    failed. Callers can retry only failed_paths().
    """
    outcomes: List[EditOutcome] = field(default_factory=list)

    def add(self, outcome: EditOutcome) -> None:
        self.outcomes.append(outcome)

    def extend(self, other: "EditManifest") -> None:
        self.outcomes.extend(other.outcomes)

    @property
    def succeeded(self) -> List[EditOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[EditOutcome]:
        return [o for o in self.outcomes if not o.ok and not o.skipped]

    @property
    def skipped(self) -> List[EditOutcome]:
        return [o for o in self.outcomes if o.skipped]

    @property
    def ok(self) -> bool:
        return not self.failed

    def failed_paths(self) -> List[str]:
        return [o.path for o in self.failed]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "edited": [{"path": o.path, "output": o.output_path} for o in self.succeeded],
            "failed": [{"path": o.path, "error": o.error} for o in self.failed],
            "skipped": [o.path for o in self.skipped],
        }
