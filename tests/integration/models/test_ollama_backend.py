from __future__ import annotations

"""
Integration tests for the Ollama backend.

Mocks `requests.post` to verify stream assembly, endpoint resolution and
error mapping without a running server.
"""

import json
import os
from typing import List
from unittest.mock import MagicMock, patch

import pytest
import requests

from codeforgeai.core.models.ollama import DEFAULT_OLLAMA_ENDPOINT, OllamaModel
from codeforgeai.domain.errors import ModelError, ResponseFormatError, StatusError, TransportError


def _stream_response(lines: List[str], status: int = 200) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status
    mock_response.text = "server says no"
    mock_response.iter_lines.return_value = iter(lines)
    mock_response.__enter__.return_value = mock_response
    return mock_response


def test_stream_chunks_are_concatenated() -> None:
    """TC-01: Partial responses are joined until 'done'."""
    lines = [
        json.dumps({"response": "Hello", "done": False}),
        "",
        json.dumps({"response": ", world", "done": False}),
        json.dumps({"response": "!", "done": True}),
        json.dumps({"response": "ignored", "done": False}),
    ]
    with patch("requests.post", return_value=_stream_response(lines)) as mock_post:
        out = OllamaModel("gemma3:1b", endpoint="http://ollama:11434/api/generate").send_request(
            "hi", {"operation": "prompt_finetune"}
        )

    assert out == "Hello, world!"
    _, kwargs = mock_post.call_args
    assert mock_post.call_args[0][0] == "http://ollama:11434/api/generate"
    assert kwargs["json"] == {"model": "gemma3:1b", "prompt": "hi"}
    assert kwargs["stream"] is True
    assert kwargs["timeout"] == 60


def test_endpoint_resolution_order() -> None:
    """TC-02: Explicit endpoint, then environment variable, then default."""
    with patch.dict(os.environ, {"OLLAMA_API_ENDPOINT": "http://env:1/api/generate"}):
        assert OllamaModel("m").endpoint == "http://env:1/api/generate"
        assert OllamaModel("m", endpoint="http://arg").endpoint == "http://arg"
    with patch.dict(os.environ, {}, clear=True):
        assert OllamaModel("m").endpoint == DEFAULT_OLLAMA_ENDPOINT


def test_non_success_status_raises_status_error() -> None:
    """TC-03: HTTP errors carry the status code and body."""
    with patch("requests.post", return_value=_stream_response([], status=404)):
        with pytest.raises(StatusError) as exc:
            OllamaModel("missing").send_request("x")
    assert exc.value.status_code == 404
    assert exc.value.body == "server says no"


def test_error_chunk_raises_status_error() -> None:
    """TC-04: Errors reported inside the stream are surfaced."""
    lines = [json.dumps({"error": "model not found"})]
    with patch("requests.post", return_value=_stream_response(lines)):
        with pytest.raises(StatusError, match="model not found"):
            OllamaModel("m").send_request("x")


def test_malformed_chunk_raises_format_error() -> None:
    """TC-05: Undecodable stream lines are a response format error."""
    with patch("requests.post", return_value=_stream_response(["{broken"])):
        with pytest.raises(ResponseFormatError):
            OllamaModel("m").send_request("x")


@pytest.mark.parametrize(
    "exc",
    [requests.exceptions.ConnectTimeout("slow"), requests.exceptions.ConnectionError("refused")],
)
def test_transport_failures(exc: Exception) -> None:
    """TC-06: Timeouts and connection errors become TransportError."""
    with patch("requests.post", side_effect=exc):
        with pytest.raises(TransportError) as err:
            OllamaModel("m").send_request("x")
    assert isinstance(err.value, ModelError)
