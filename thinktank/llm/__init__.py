"""LLM provider abstraction layer."""

from thinktank.llm.base import LLMProvider
from thinktank.llm.claude import ClaudeProvider
from thinktank.llm.gemini import GeminiProvider
from thinktank.llm.models import (
    GroupInfo,
    LLMAvailableModel,
    LLMResponse,
    ModelOptions,
    ModelPricing,
    SystemPrompt,
)
from thinktank.llm.openai_adapter import OpenAIProvider
from thinktank.llm.openrouter import OpenRouterProvider
from thinktank.llm.options import resolve_model_options, resolve_system_prompt
from thinktank.llm.registry import ProviderRegistry, ProviderRegistryError

_PROVIDER_CLASSES: list[type[LLMProvider]] = [
    OpenAIProvider,
    ClaudeProvider,
    GeminiProvider,
    OpenRouterProvider,
]


def create_default_registry(api_keys: dict[str, str] | None = None) -> ProviderRegistry:
    """Build a registry holding one instance of every built-in provider.

    ``api_keys`` maps provider ids to explicit keys; providers without an
    entry fall back to their environment variable on first use.
    """
    api_keys = api_keys or {}
    registry = ProviderRegistry()
    for cls in _PROVIDER_CLASSES:
        registry.register_provider(cls(api_key=api_keys.get(cls.provider_id)))
    return registry


__all__ = [
    "ClaudeProvider",
    "GeminiProvider",
    "GroupInfo",
    "LLMAvailableModel",
    "LLMProvider",
    "LLMResponse",
    "ModelOptions",
    "ModelPricing",
    "OpenAIProvider",
    "OpenRouterProvider",
    "ProviderRegistry",
    "ProviderRegistryError",
    "SystemPrompt",
    "create_default_registry",
    "resolve_model_options",
    "resolve_system_prompt",
]
