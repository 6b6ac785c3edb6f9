from __future__ import annotations

"""
Error Taxonomy.

Defines the exception hierarchy shared by the analysis, model and pipeline
layers. Backends translate transport-library failures into these types so
the orchestration layer never depends on a concrete HTTP client.
"""

from typing import Optional


class CodeforgeError(Exception):
    """Root of every recoverable application error."""


class ConfigError(CodeforgeError):
    """Configuration file is unreadable, malformed or references unknown values."""


class FileSystemError(CodeforgeError):
    """
    A path is missing or cannot be read/written.

    Attributes:
        path: The offending filesystem path.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class FormatError(CodeforgeError):
    """A document (tree JSON or model response body) is structurally invalid."""


class GitError(CodeforgeError):
    """The git executable failed or is not available."""


class ModelError(CodeforgeError):
    """Root of every failure raised by a text-generation backend."""


class TransportError(ModelError):
    """Network failure or timeout while talking to a backend."""


class StatusError(ModelError):
    """
    Backend answered with a non-success status.

    Attributes:
        status_code: HTTP status code returned by the backend.
        body: Raw response body (truncated for logging).
    """

    def __init__(self, status_code: int, body: str = "", message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"Backend returned HTTP {status_code}: {body[:500]}")


class ResponseFormatError(ModelError, FormatError):
    """Backend answered successfully but the body could not be decoded."""
