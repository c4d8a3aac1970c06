"""Fan one prompt out to several configured models."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from thinktank.config.lookup import (
    find_model,
    find_model_group,
    get_enabled_group_models,
    get_enabled_models,
    parse_model_reference,
)
from thinktank.config.models import AppConfig, ModelConfig, ModelGroup
from thinktank.errors.base import ConfigError, ThinktankError
from thinktank.errors.categorization import ErrorContext, create_contextual_error
from thinktank.errors.factories import create_model_not_found_error
from thinktank.llm.models import GroupInfo, LLMResponse, ModelOptions, SystemPrompt
from thinktank.llm.options import resolve_system_prompt
from thinktank.llm.registry import ProviderRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueryResult:
    """Outcome of querying one model: exactly one of response/error is set."""

    model_key: str
    response: LLMResponse | None = None
    error: ThinktankError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def select_models(
    config: AppConfig,
    model_refs: list[str] | None = None,
    group: str | None = None,
) -> list[ModelConfig]:
    """Resolve ``--model`` references and/or ``--group`` into model configs.

    Explicit references win; with a group they must belong to it. Without
    either, every enabled model is selected.
    """
    if group is not None and group not in config.groups:
        raise ConfigError(
            f'Group "{group}" not found in configuration.',
            suggestions=[f"Available groups: {', '.join(config.groups)}"],
        )

    if model_refs:
        pool = config.groups[group].models if group else config.models
        selected = []
        for ref in model_refs:
            provider, model_id = parse_model_reference(ref, config)
            model = next(
                (m for m in pool if m.provider == provider and m.model_id == model_id),
                None,
            )
            if model is None:
                raise create_model_not_found_error(
                    ref, [m.key for m in pool if m.enabled], group
                )
            selected.append(model)
        return selected

    models = get_enabled_group_models(config, group) if group else get_enabled_models(config)
    if not models:
        where = f'group "{group}"' if group else "configuration"
        raise ConfigError(
            f"No enabled models in {where}.",
            suggestions=[
                "Enable at least one model in your configuration",
                "Or pass models explicitly with --model provider:modelId",
            ],
        )
    return models


def _apply_group_entry(
    config: AppConfig, model: ModelConfig, group: ModelGroup | None
) -> ModelConfig:
    """Layer the group's own entry for *model* over the top-level entry.

    Options set on the group entry override the top-level model options key by
    key; a system prompt on the group entry replaces the top-level one.
    """
    base = find_model(config, model.provider, model.model_id) or model
    entry = (
        next((m for m in group.models if m.same_model(model)), None) if group else None
    )
    if entry is None or entry is base:
        return base
    return base.model_copy(
        update={
            "options": {**base.options, **entry.options},
            "system_prompt": entry.system_prompt or base.system_prompt,
        }
    )


async def _query_one(
    registry: ProviderRegistry,
    config: AppConfig,
    prompt: str,
    model: ModelConfig,
    group: str | None,
    cli_options: ModelOptions | None,
    system_prompt: SystemPrompt | None,
) -> QueryResult:
    try:
        model_group = find_model_group(config, model, group)
        effective = _apply_group_entry(config, model, model_group)
        prompt_to_send = resolve_system_prompt(
            system_prompt,
            effective.system_prompt,
            model_group.system_prompt if model_group else None,
        )
        response = await registry.call_provider(
            model.provider,
            model.model_id,
            prompt,
            model_config=effective,
            group_options=model_group.options if model_group else None,
            cli_options=cli_options,
            system_prompt=prompt_to_send,
        )
    except ThinktankError as e:
        logger.warning("%s failed: %s", model.key, e.message)
        return QueryResult(model_key=model.key, error=e)
    except Exception as e:
        logger.exception("Unexpected failure querying %s", model.key)
        context = ErrorContext(
            operation=f"querying {model.key}",
            provider_id=model.provider,
            model_id=model.model_id,
        )
        return QueryResult(model_key=model.key, error=create_contextual_error(e, context))

    if model_group is not None:
        response.group_info = GroupInfo(
            name=model_group.name, system_prompt=model_group.system_prompt
        )
    return QueryResult(model_key=model.key, response=response)


async def query_models(
    registry: ProviderRegistry,
    config: AppConfig,
    prompt: str,
    models: list[ModelConfig],
    group: str | None = None,
    cli_options: ModelOptions | None = None,
    system_prompt: SystemPrompt | None = None,
) -> list[QueryResult]:
    """Query every model concurrently; one failure never cancels the others.

    Results come back in the order of *models*.
    """
    logger.debug("Querying %d model(s)", len(models))
    return list(
        await asyncio.gather(
            *(
                _query_one(registry, config, prompt, m, group, cli_options, system_prompt)
                for m in models
            )
        )
    )
