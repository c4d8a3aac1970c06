"""Options resolution cascade: model < group < call site."""

from __future__ import annotations

from thinktank.llm.models import ModelOptions, SystemPrompt


def resolve_model_options(
    model_options: ModelOptions | None = None,
    group_options: ModelOptions | None = None,
    cli_options: ModelOptions | None = None,
) -> ModelOptions:
    """Merge option layers into a new dict; later layers win per key.

    The merge is shallow. A nested value such as ``thinking`` is replaced
    wholesale by the highest layer that sets it. Inputs are not mutated.
    """
    resolved: ModelOptions = {}
    for layer in (model_options, group_options, cli_options):
        if layer:
            resolved.update(layer)
    return resolved


def resolve_system_prompt(
    override: SystemPrompt | None = None,
    model_prompt: SystemPrompt | None = None,
    group_prompt: SystemPrompt | None = None,
) -> SystemPrompt | None:
    """Pick the system prompt: call-site override, then model, then group."""
    for prompt in (override, model_prompt, group_prompt):
        if prompt is not None:
            return prompt
    return None
