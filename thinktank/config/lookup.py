"""Read-only lookups over a loaded AppConfig."""

import logging
import os

from thinktank.errors.base import ConfigError
from thinktank.errors.factories import create_model_format_error

from .models import DEFAULT_GROUP, AppConfig, ModelConfig, ModelGroup

logger = logging.getLogger(__name__)

PROVIDER_ENV_VARS = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GEMINI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}


def parse_model_reference(
    reference: str, config: AppConfig | None = None
) -> tuple[str, str]:
    """Split ``provider:modelId`` on the first colon.

    Model ids may themselves contain colons (``openrouter:x/y:free``).
    """
    provider, sep, model_id = reference.partition(":")
    if not sep or not provider or not model_id:
        models = config.models if config is not None else []
        raise create_model_format_error(
            reference,
            available_providers=sorted({m.provider for m in models}),
            available_models=[m.key for m in models],
        )
    return provider, model_id


def get_enabled_models(config: AppConfig) -> list[ModelConfig]:
    return [m for m in config.models if m.enabled]


def filter_models(config: AppConfig, filter: str) -> list[ModelConfig]:
    """Match on provider, model id, or the combined ``provider:modelId`` key."""
    return [
        m
        for m in config.models
        if filter in (m.provider, m.model_id, m.key)
    ]


def find_model(config: AppConfig, provider: str, model_id: str) -> ModelConfig | None:
    for model in config.models:
        if model.provider == provider and model.model_id == model_id:
            return model
    return None


def get_group(config: AppConfig, group_name: str) -> list[ModelConfig]:
    """Models of *group_name*, or an empty list if the group does not exist."""
    group = config.groups.get(group_name)
    return list(group.models) if group else []


def get_enabled_group_models(config: AppConfig, group_name: str) -> list[ModelConfig]:
    return [m for m in get_group(config, group_name) if m.enabled]


def find_model_group(
    config: AppConfig,
    model: ModelConfig,
    preferred_group: str | None = None,
) -> ModelGroup | None:
    """Return the group whose system prompt and options apply to *model*.

    A model listed in several groups is ambiguous unless *preferred_group* is
    one of them. A model listed in no group but present in ``models`` belongs
    to the default group. Returns None for a model the config does not know.
    """
    matches = [
        group
        for group in config.groups.values()
        if any(m.same_model(model) for m in group.models)
    ]
    if preferred_group is not None:
        for group in matches:
            if group.name == preferred_group:
                return group
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        names = ", ".join(g.name for g in matches)
        raise ConfigError(
            f'Model "{model.key}" belongs to multiple groups ({names}); '
            "choose one explicitly.",
            suggestions=[
                f"Run with --group set to one of: {names}",
                "Or list the model in a single group in your configuration",
            ],
            examples=[f"thinktank run prompt.txt --group {matches[0].name}"],
        )
    if find_model(config, model.provider, model.model_id) is not None:
        return config.groups.get(DEFAULT_GROUP)
    return None


def get_api_key(model: ModelConfig) -> str | None:
    """Read the model's key from its env var, or the provider's default one."""
    env_var = model.api_key_env_var or PROVIDER_ENV_VARS.get(
        model.provider, f"{model.provider.upper()}_API_KEY"
    )
    return os.environ.get(env_var) or None


def validate_model_api_keys(
    config: AppConfig,
) -> tuple[list[ModelConfig], list[ModelConfig]]:
    """Split enabled models into (with key available, missing key)."""
    valid: list[ModelConfig] = []
    missing: list[ModelConfig] = []
    for model in get_enabled_models(config):
        (valid if get_api_key(model) else missing).append(model)
    if missing:
        logger.debug("Models missing API keys: %s", ", ".join(m.key for m in missing))
    return valid, missing
