from __future__ import annotations

"""
Integration tests for the GitHub Models backend and catalog helper.
"""

import os
from unittest.mock import MagicMock, patch

import pytest
import requests

from codeforgeai.core.models.github_models import GitHubModelsClient, fetch_model_catalog
from codeforgeai.domain.errors import ResponseFormatError, StatusError, TransportError


def _json_response(payload, status: int = 200) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status
    mock_response.text = "error body"
    mock_response.json.return_value = payload
    return mock_response


def test_chat_completion_returns_first_choice() -> None:
    """TC-01: The first choice's content is returned; auth and payload are set."""
    payload = {"choices": [{"message": {"content": "Paris"}}]}
    client = GitHubModelsClient(model_name="gpt-4o-mini", endpoint="https://x/chat", token="tok")

    with patch("requests.post", return_value=_json_response(payload)) as mock_post:
        assert client.send_request("capital of France?", {"operation": "code_generation"}) == "Paris"

    args, kwargs = mock_post.call_args
    assert args[0] == "https://x/chat"
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["json"]["model"] == "gpt-4o-mini"
    assert kwargs["json"]["messages"][0]["role"] == "system"
    assert kwargs["json"]["messages"][1] == {"role": "user", "content": "capital of France?"}


def test_token_loader_and_env_defaults() -> None:
    """TC-02: Token comes from the loader; model and endpoint from the environment."""
    env = {"GITHUB_MODELS_MODEL": "env-model", "GITHUB_MODELS_ENDPOINT": "https://env/chat"}
    with patch.dict(os.environ, env, clear=True):
        client = GitHubModelsClient(token_loader=lambda: "vault-token")
    assert client.token == "vault-token"
    assert client.model_name == "env-model"
    assert client.endpoint == "https://env/chat"


def test_error_status_raises() -> None:
    """TC-03: Non-200 answers raise StatusError."""
    with patch("requests.post", return_value=_json_response({}, status=401)):
        with pytest.raises(StatusError) as exc:
            GitHubModelsClient(model_name="m", token="t").send_request("x")
    assert exc.value.status_code == 401


@pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{"message": {}}]}])
def test_unexpected_body_raises_format_error(payload) -> None:
    """TC-04: Bodies without a usable choice are rejected."""
    with patch("requests.post", return_value=_json_response(payload)):
        with pytest.raises(ResponseFormatError):
            GitHubModelsClient(model_name="m", token="t").send_request("x")


def test_timeout_raises_transport_error() -> None:
    """TC-05: Network timeouts map to TransportError."""
    with patch("requests.post", side_effect=requests.exceptions.ReadTimeout("slow")):
        with pytest.raises(TransportError):
            GitHubModelsClient(model_name="m", token="t").send_request("x")


def test_fetch_model_catalog() -> None:
    """TC-06: Catalog entries are reduced to their ids."""
    payload = [{"id": "openai/gpt-4o"}, {"id": "meta/llama"}, {"name": "no id"}]
    with patch("requests.get", return_value=_json_response(payload)) as mock_get:
        assert fetch_model_catalog("tok") == ["openai/gpt-4o", "meta/llama"]
    assert mock_get.call_args[1]["headers"]["Authorization"] == "Bearer tok"


def test_fetch_model_catalog_error_status() -> None:
    """TC-07: Catalog failures raise StatusError."""
    with patch("requests.get", return_value=_json_response([], status=503)):
        with pytest.raises(StatusError):
            fetch_model_catalog("tok")
