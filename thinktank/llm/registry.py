"""Provider registry and dispatch entry point."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from thinktank.errors.base import ConfigError
from thinktank.llm.base import LLMProvider
from thinktank.llm.models import LLMResponse, ModelOptions, SystemPrompt
from thinktank.llm.options import resolve_model_options

if TYPE_CHECKING:
    from thinktank.config.models import ModelConfig

logger = logging.getLogger(__name__)


class ProviderRegistryError(ConfigError):
    """Wiring problem: bad registration or an unknown provider id."""


class ProviderRegistry:
    """Directory of provider instances keyed by ``provider_id``.

    Build one at startup (see ``create_default_registry``) and pass it to
    whatever needs dispatch. Tests construct their own isolated instances.
    """

    def __init__(self) -> None:
        self._providers: dict[str, LLMProvider] = {}

    def register_provider(self, provider: LLMProvider | None) -> None:
        if provider is None:
            raise ProviderRegistryError("Cannot register undefined or null provider")
        provider_id = getattr(provider, "provider_id", None)
        if not provider_id:
            raise ProviderRegistryError("Provider must have a providerId")
        if provider_id in self._providers:
            raise ProviderRegistryError(
                f"Provider with ID '{provider_id}' is already registered",
                suggestions=[
                    "Register each provider exactly once at startup",
                    "Call clear_registry() before re-registering in tests",
                ],
            )
        self._providers[provider_id] = provider
        logger.debug("Registered provider %s", provider_id)

    def get_provider(self, provider_id: str) -> LLMProvider | None:
        return self._providers.get(provider_id)

    def has_provider(self, provider_id: str) -> bool:
        return provider_id in self._providers

    def get_provider_ids(self) -> list[str]:
        return list(self._providers)

    def get_all_providers(self) -> list[LLMProvider]:
        return list(self._providers.values())

    def clear_registry(self) -> None:
        self._providers.clear()

    async def call_provider(
        self,
        provider_id: str,
        model_id: str,
        prompt: str,
        model_config: ModelConfig | None = None,
        group_options: ModelOptions | None = None,
        cli_options: ModelOptions | None = None,
        system_prompt: SystemPrompt | None = None,
    ) -> LLMResponse:
        """Resolve cascading options and forward to the provider's ``generate``.

        Provider errors propagate untouched; only an unknown ``provider_id``
        raises ``ProviderRegistryError``.
        """
        options = resolve_model_options(
            model_config.options if model_config else None,
            group_options,
            cli_options,
        )
        provider = self.get_provider(provider_id)
        if provider is None:
            raise ProviderRegistryError(
                f"Provider '{provider_id}' not found for model {provider_id}:{model_id}",
                suggestions=[
                    f"Registered providers: {', '.join(self._providers) or 'none'}",
                    "Check the provider prefix of the model reference",
                ],
            )
        logger.debug("Dispatching %s:%s with options %s", provider_id, model_id, options)
        return await provider.generate(prompt, model_id, options, system_prompt)
