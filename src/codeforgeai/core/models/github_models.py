from __future__ import annotations

"""
GitHub Models Hosted Backend.

Chat-completions client for the GitHub Models inference endpoint plus a
helper that lists the public model catalog.
"""

import logging
import os
from typing import Any, Callable, Dict, List, Mapping, Optional

import requests

from codeforgeai.core.models.base import Model
from codeforgeai.domain.errors import ResponseFormatError, StatusError, TransportError
from codeforgeai.infra.network.common import CATALOG_TIMEOUT, DEFAULT_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)

DEFAULT_GITHUB_MODELS_ENDPOINT = "https://models.inference.ai.azure.com/chat/completions"
GITHUB_MODELS_CATALOG_URL = "https://models.github.ai/catalog/models"
ENDPOINT_ENV = "GITHUB_MODELS_ENDPOINT"
MODEL_ENV = "GITHUB_MODELS_MODEL"
TOKEN_ENV = "GITHUB_TOKEN"

SYSTEM_PROMPT = "You are a helpful assistant."

Message = Dict[str, Any]


def env_token_loader() -> Optional[str]:
    """Default token source: the GITHUB_TOKEN environment variable."""
    return os.environ.get(TOKEN_ENV) or None


class GitHubModelsClient(Model):
    """
    Client for the GitHub Models chat-completions API.

    Endpoint, model and token are resolved once at construction. The token
    comes from a loader callable so a secret store can be plugged in.
    """

    def __init__(
            self,
            model_name: str = "",
            endpoint: str = "",
            token: Optional[str] = None,
            token_loader: Callable[[], Optional[str]] = env_token_loader,
            timeout: float = 0,
    ) -> None:
        self.model_name = model_name or os.environ.get(MODEL_ENV, "")
        self.endpoint = endpoint or os.environ.get(ENDPOINT_ENV) or DEFAULT_GITHUB_MODELS_ENDPOINT
        self.token = token if token is not None else (token_loader() or "")
        self.timeout = timeout or DEFAULT_TIMEOUT

    def send_request(self, prompt: str, metadata: Optional[Mapping[str, Any]] = None) -> str:
        operation = (metadata or {}).get("operation", "")
        logger.debug(f"GitHub Models request ({operation}) with model {self.model_name}")
        return self.simple_prompt(prompt)

    def simple_prompt(self, prompt: str) -> str:
        """Send a single user turn behind the default system prompt."""
        return self.chat([
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ])

    def chat(self, messages: List[Message]) -> str:
        """
        Send a (multi-turn) conversation and return the first choice.

        Raises:
            TransportError, StatusError, ResponseFormatError
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.token}",
            "User-Agent": USER_AGENT,
        }
        payload = {"messages": messages, "model": self.model_name}

        try:
            response = requests.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise TransportError(f"GitHub Models request timed out after {self.timeout}s.") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"GitHub Models communication error: {e}") from e

        if response.status_code != 200:
            raise StatusError(response.status_code, response.text)

        try:
            data = response.json()
            return str(data["choices"][0]["message"]["content"])
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ResponseFormatError(f"Unexpected GitHub Models response: {e}") from e


def fetch_model_catalog(token: str, url: str = GITHUB_MODELS_CATALOG_URL) -> List[str]:
    """
    List the model identifiers published in the GitHub Models catalog.

    Args:
        token: GitHub token with models access.
        url: Catalog endpoint.

    Returns:
        List[str]: Model ids in catalog order.

    Raises:
        TransportError, StatusError, ResponseFormatError
    """
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": USER_AGENT,
    }
    try:
        response = requests.get(url, headers=headers, timeout=CATALOG_TIMEOUT)
    except requests.exceptions.RequestException as e:
        raise TransportError(f"Catalog request failed: {e}") from e

    if response.status_code != 200:
        raise StatusError(response.status_code, response.text)

    try:
        data = response.json()
    except ValueError as e:
        raise ResponseFormatError(f"Catalog body is not JSON: {e}") from e

    entries = data.get("models", []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ResponseFormatError("Catalog does not contain a model list.")
    ids = [str(entry["id"]) for entry in entries if isinstance(entry, dict) and entry.get("id")]
    logger.info(f"Fetched {len(ids)} models from the GitHub Models catalog.")
    return ids
