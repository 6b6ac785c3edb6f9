from __future__ import annotations

"""
Ollama Local Inference Backend.

Posts prompts to the Ollama generate endpoint and concatenates the
newline-delimited JSON chunks it streams back.
"""

import json
import logging
import os
from typing import Any, Mapping, Optional

import requests

from codeforgeai.core.models.base import Model
from codeforgeai.domain.errors import ResponseFormatError, StatusError, TransportError
from codeforgeai.infra.network.common import DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_ENDPOINT = "http://localhost:11434/api/generate"
OLLAMA_ENDPOINT_ENV = "OLLAMA_API_ENDPOINT"


class OllamaModel(Model):
    """
    Client for a local Ollama server.

    The endpoint is resolved once at construction: explicit argument, then
    the OLLAMA_API_ENDPOINT environment variable, then the local default.
    """

    def __init__(self, model_name: str, endpoint: str = "", timeout: float = 0) -> None:
        self.model_name = model_name
        self.endpoint = endpoint or os.environ.get(OLLAMA_ENDPOINT_ENV) or DEFAULT_OLLAMA_ENDPOINT
        self.timeout = timeout or DEFAULT_TIMEOUT

    def send_request(self, prompt: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
        operation = (metadata or {}).get("operation", "")
        payload = {"model": self.model_name, "prompt": prompt}
        headers = {"User-Agent": USER_AGENT}
        logger.debug(f"Ollama request ({operation}) to {self.endpoint} with model {self.model_name}")

        try:
            with requests.post(
                    self.endpoint,
                    json=payload,
                    headers=headers,
                    timeout=self.timeout,
                    stream=True,
            ) as response:
                if response.status_code != 200:
                    raise StatusError(response.status_code, response.text)
                return self._collect_stream(response)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"Ollama request timed out after {self.timeout}s.") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Ollama communication error: {e}") from e

    def _collect_stream(self, response: requests.Response) -> str:
        """Concatenate streamed chunks until the server reports completion."""
        parts = []
        for raw_line in response.iter_lines(decode_unicode=True):
            if not raw_line:
                continue
            try:
                chunk = json.loads(raw_line)
            except ValueError as e:
                raise ResponseFormatError(f"Malformed Ollama stream chunk: {raw_line[:200]}") from e
            if not isinstance(chunk, dict):
                raise ResponseFormatError("Ollama stream chunk is not an object.")
            if chunk.get("error"):
                raise StatusError(response.status_code, str(chunk["error"]))
            parts.append(str(chunk.get("response", "")))
            if chunk.get("done"):
                break
        return "".join(parts)
