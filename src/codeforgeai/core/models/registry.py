from __future__ import annotations

"""
Model Provider Registry.

Maps provider names (as configured under "integrations.default") to
factories building a Model for a role ("general" or "code"). New backends
are added by registering a factory; the orchestration code never changes.
"""

import logging
from typing import Callable, Dict, List

from codeforgeai.core.models.base import Model
from codeforgeai.core.models.github_models import GitHubModelsClient
from codeforgeai.core.models.ollama import OllamaModel
from codeforgeai.domain.config import AppConfig
from codeforgeai.domain.errors import ConfigError

logger = logging.getLogger(__name__)

ModelFactory = Callable[[AppConfig, str], Model]


class ModelRegistry:
    """Name-keyed collection of backend factories."""

    def __init__(self) -> None:
        self._factories: Dict[str, ModelFactory] = {}

    def register(self, provider: str, factory: ModelFactory) -> None:
        """Register (or replace) the factory for a provider name."""
        key = provider.strip().lower()
        if key in self._factories:
            logger.debug(f"Replacing model factory for provider '{key}'.")
        self._factories[key] = factory

    def providers(self) -> List[str]:
        return sorted(self._factories)

    def create(self, cfg: AppConfig, role: str) -> Model:
        """
        Build the model answering a role for the configured provider.

        Args:
            cfg: Configuration snapshot.
            role: "general" or "code".

        Returns:
            Model: Ready-to-use backend.

        Raises:
            ConfigError: If the configured provider is not registered.
        """
        provider = cfg.provider.strip().lower()
        factory = self._factories.get(provider)
        if factory is None:
            raise ConfigError(
                f"Unknown model provider '{cfg.provider}'. Available: {', '.join(self.providers())}"
            )
        return factory(cfg, role)

# -----------------------------------------------------------------------------
# BUILT-IN PROVIDERS
# -----------------------------------------------------------------------------

def _ollama_factory(cfg: AppConfig, role: str) -> Model:
    return OllamaModel(cfg.model_name(role))


def _github_models_factory(cfg: AppConfig, role: str) -> Model:
    return GitHubModelsClient(model_name=cfg.model_name(role, github=True))


def build_default_registry() -> ModelRegistry:
    """Create a registry holding the built-in providers."""
    registry = ModelRegistry()
    registry.register("ollama", _ollama_factory)
    registry.register("githubmodels", _github_models_factory)
    return registry
