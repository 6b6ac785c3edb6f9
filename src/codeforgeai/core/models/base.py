from __future__ import annotations

"""
Base Definitions for Model Backends.

Provides the abstract single-operation capability every text-generation
backend implements. The orchestration layer depends on this interface
only, never on a concrete backend.
"""

from abc import ABC, abstractmethod
from typing import Any, Mapping, Optional


class Model(ABC):
    """
    Interchangeable text-generation backend.

    Attributes:
        model_name: Backend-specific model identifier.
    """

    model_name: str = ""

    @abstractmethod
    def send_request(self, prompt: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
        """
        Send one prompt and return the generated text.

        Args:
            prompt: Fully composed prompt.
            metadata: Operation tag plus extra key/values ({"operation": ...}).

        Returns:
            str: Generated text.

        Raises:
            TransportError: Network failure or timeout.
            StatusError: Non-success response from the backend.
            ResponseFormatError: Undecodable response body.
        """
