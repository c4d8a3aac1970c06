"""OpenAI adapter for thinktank."""

from __future__ import annotations

import logging
from typing import Any

from openai import AsyncOpenAI

from thinktank.llm.base import LLMProvider
from thinktank.llm.models import LLMAvailableModel, LLMResponse, ModelOptions, SystemPrompt

logger = logging.getLogger(__name__)

_CONSUMED_OPTIONS = {"temperature", "max_tokens", "system_prompt"}


def _is_reasoning_model(model_id: str) -> bool:
    """o3-mini rejects ``temperature`` and takes ``max_completion_tokens``."""
    return model_id == "o3-mini" or model_id.startswith("o3-mini-")


def build_chat_request(
    prompt: str,
    model_id: str,
    options: ModelOptions,
    system_prompt: SystemPrompt | None,
    *,
    reasoning: bool = False,
) -> dict[str, Any]:
    """Build chat.completions kwargs shared by OpenAI-compatible providers."""
    messages = []
    if system_prompt is not None:
        messages.append({"role": "system", "content": system_prompt.text})
    messages.append({"role": "user", "content": prompt})

    request: dict[str, Any] = {"model": model_id, "messages": messages}
    if reasoning:
        if "max_tokens" in options:
            request["max_completion_tokens"] = options["max_tokens"]
    else:
        if "temperature" in options:
            request["temperature"] = options["temperature"]
        if "max_tokens" in options:
            request["max_tokens"] = options["max_tokens"]

    extra = {k: v for k, v in options.items() if k not in _CONSUMED_OPTIONS}
    if extra:
        request["extra_body"] = extra
    return request


def first_choice_text(response: Any) -> str:
    if not response.choices:
        return ""
    return response.choices[0].message.content or ""


def usage_metadata(response: Any) -> dict[str, Any] | None:
    usage = response.usage
    if usage is None:
        return None
    return {
        "prompt_tokens": usage.prompt_tokens,
        "completion_tokens": usage.completion_tokens,
        "total_tokens": usage.total_tokens,
    }


class OpenAIProvider(LLMProvider):
    """OpenAI adapter using the async SDK."""

    provider_id = "openai"
    display_name = "OpenAI"
    env_var = "OPENAI_API_KEY"
    console_url = "https://platform.openai.com/api-keys"

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = self._resolve_api_key()
            self._client = AsyncOpenAI(api_key=api_key, max_retries=0)
            logger.debug("Created OpenAI client")
        return self._client

    async def generate(
        self,
        prompt: str,
        model_id: str,
        options: ModelOptions | None = None,
        system_prompt: SystemPrompt | None = None,
    ) -> LLMResponse:
        client = self._get_client()
        request = build_chat_request(
            prompt,
            model_id,
            options or {},
            system_prompt,
            reasoning=_is_reasoning_model(model_id),
        )
        try:
            response = await client.chat.completions.create(**request)
        except Exception as e:
            error = self._classify(e, model_id)
            logger.warning("%s", error.message)
            raise error from e

        return LLMResponse(
            provider=self.provider_id,
            model_id=model_id,
            text=first_choice_text(response),
            metadata={
                "usage": usage_metadata(response),
                "model": response.model,
                "id": response.id,
                "created": response.created,
            },
        )

    async def list_models(self, api_key: str | None = None) -> list[LLMAvailableModel]:
        client = AsyncOpenAI(api_key=api_key, max_retries=0) if api_key else self._get_client()
        try:
            page = await client.models.list()
        except Exception as e:
            raise self._classify(e, operation="list models") from e

        return [
            LLMAvailableModel(
                id=model.id,
                description=f"Owned by: {model.owned_by}",
                provider=self.provider_id,
            )
            for model in page.data
        ]
