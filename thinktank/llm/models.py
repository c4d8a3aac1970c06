"""Pydantic models for the LLM subsystem."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# Open bag of provider options (temperature, max_tokens, top_p, thinking, ...).
ModelOptions = dict[str, Any]


class SystemPrompt(BaseModel):
    """System instructions sent ahead of the user prompt."""

    text: str
    metadata: dict[str, Any] | None = None


class GroupInfo(BaseModel):
    """The model group a response was produced under."""

    name: str
    system_prompt: SystemPrompt


class LLMResponse(BaseModel):
    """Normalized response from any provider.

    ``metadata`` carries raw vendor usage and identifiers for diagnostics; its
    keys differ per provider.
    """

    provider: str
    model_id: str
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    group_info: GroupInfo | None = None


class ModelPricing(BaseModel):
    """Per-token prices as reported by the vendor (usually decimal strings)."""

    prompt: str | float | None = None
    completion: str | float | None = None


class LLMAvailableModel(BaseModel):
    """One entry returned by a provider's model listing."""

    id: str
    description: str | None = None
    name: str | None = None
    provider: str | None = None
    context_window: int | None = None
    pricing: ModelPricing | None = None
