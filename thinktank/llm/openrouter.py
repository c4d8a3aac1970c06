"""OpenRouter adapter for thinktank.

OpenRouter speaks the OpenAI chat completions protocol, so generation reuses
the OpenAI SDK pointed at the OpenRouter base URL.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from openai import AsyncOpenAI

from thinktank.errors.base import ApiError
from thinktank.llm.base import LLMProvider
from thinktank.llm.models import (
    LLMAvailableModel,
    LLMResponse,
    ModelOptions,
    ModelPricing,
    SystemPrompt,
)
from thinktank.llm.openai_adapter import build_chat_request, first_choice_text, usage_metadata

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_HEADERS = {
    "HTTP-Referer": "https://github.com/phrazzld/thinktank",
    "X-Title": "thinktank CLI",
}


def _describe(model: dict[str, Any]) -> str:
    description = model.get("name") or ""
    context_length = model.get("context_length")
    if context_length:
        description += (
            f" ({context_length} tokens)" if description else f"Context: {context_length} tokens"
        )
    pricing = model.get("pricing") or {}
    prompt, completion = pricing.get("prompt"), pricing.get("completion")
    if prompt and completion:
        cost = f"${prompt}/1M prompt, ${completion}/1M completion"
        description += f" • {cost}" if description else f"Pricing: {cost}"
    return description or f"Model ID: {model['id']}"


class OpenRouterProvider(LLMProvider):
    """OpenRouter adapter using the OpenAI async SDK."""

    provider_id = "openrouter"
    display_name = "OpenRouter"
    env_var = "OPENROUTER_API_KEY"
    console_url = "https://openrouter.ai/keys"

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = self._resolve_api_key()
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=OPENROUTER_BASE_URL,
                default_headers=DEFAULT_HEADERS,
                max_retries=0,
            )
            logger.debug("Created OpenRouter client")
        return self._client

    async def generate(
        self,
        prompt: str,
        model_id: str,
        options: ModelOptions | None = None,
        system_prompt: SystemPrompt | None = None,
    ) -> LLMResponse:
        client = self._get_client()
        request = build_chat_request(prompt, model_id, options or {}, system_prompt)
        try:
            response = await client.chat.completions.create(**request)
        except Exception as e:
            error = self._classify(e, model_id)
            logger.warning("%s", error.message)
            raise error from e

        metadata: dict[str, Any] = {
            "usage": usage_metadata(response),
            "model": response.model,
            "id": response.id,
            "created": response.created,
        }
        # OpenRouter adds a non-standard ``route`` field on fallback routing.
        extra = getattr(response, "model_extra", None)
        if isinstance(extra, dict) and "route" in extra:
            metadata["route"] = extra["route"]

        return LLMResponse(
            provider=self.provider_id,
            model_id=model_id,
            text=first_choice_text(response),
            metadata=metadata,
        )

    async def list_models(self, api_key: str | None = None) -> list[LLMAvailableModel]:
        key = api_key or self._resolve_api_key()
        headers = {"Authorization": f"Bearer {key}", **DEFAULT_HEADERS}
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.get(
                    f"{OPENROUTER_BASE_URL}/models", headers=headers, timeout=30.0
                )
                resp.raise_for_status()
                data = resp.json()
        except Exception as e:
            raise self._classify(e, operation="list models") from e

        models = data.get("data") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise ApiError(
                "Invalid response format received from OpenRouter list models API",
                provider_id=self.provider_id,
                suggestions=["Try again later; the models endpoint returned unexpected data"],
            )

        return [
            LLMAvailableModel(
                id=model["id"],
                name=model.get("name"),
                description=_describe(model),
                provider=self.provider_id,
                context_window=model.get("context_length"),
                pricing=ModelPricing(**model["pricing"]) if model.get("pricing") else None,
            )
            for model in models
        ]
