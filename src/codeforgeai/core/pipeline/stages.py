from __future__ import annotations

"""
Pipeline Stage Execution.

Runs one stage and captures its outcome as an explicit StageResult, so the
Engine can apply the stage-specific policy (abort or fallback) instead of
relying on implicit default values.
"""

import logging
from typing import Any, Callable, TypeVar

from codeforgeai.core.models.base import Model
from codeforgeai.domain.errors import CodeforgeError
from codeforgeai.domain.pipeline_models import PipelineRequest, StageResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_stage(stage: str, func: Callable[..., T], *args: Any, **kwargs: Any) -> StageResult[T]:
    """
    Execute a stage callable and wrap its outcome.

    Application errors (CodeforgeError) and OS-level I/O errors become a
    failed StageResult and are logged; anything else propagates.

    Args:
        stage: Stage name used in logs.
        func: Callable performing the stage.

    Returns:
        StageResult: Success with the returned value, or failure with the error.
    """
    try:
        value = func(*args, **kwargs)
    except (CodeforgeError, OSError) as e:
        logger.error(f"Stage '{stage}' failed: {e}")
        return StageResult.failure(stage, e)
    return StageResult.success(stage, value)


def call_model(model: Model, request: PipelineRequest) -> str:
    """Send a composed request through a model."""
    logger.debug(
        f"Sending '{request.operation.value}' request ({len(request.base_prompt)} chars)."
    )
    return model.send_request(request.base_prompt, request.operation_metadata())


def run_model_stage(stage: str, model: Model, request: PipelineRequest) -> StageResult[str]:
    """Shortcut for a stage consisting of a single model call."""
    return run_stage(stage, call_model, model, request)
