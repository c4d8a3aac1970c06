"""Anthropic Claude adapter for thinktank."""

from __future__ import annotations

import logging
import re
from typing import Any

from anthropic import AsyncAnthropic

from thinktank.llm.base import LLMProvider
from thinktank.llm.models import LLMAvailableModel, LLMResponse, ModelOptions, SystemPrompt

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1000
DEFAULT_TEMPERATURE = 0.7

_CONSUMED_OPTIONS = {"temperature", "max_tokens", "thinking", "system_prompt"}


def _to_snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


class ClaudeProvider(LLMProvider):
    """Claude adapter using the Anthropic async SDK."""

    provider_id = "anthropic"
    display_name = "Anthropic"
    env_var = "ANTHROPIC_API_KEY"
    console_url = "https://console.anthropic.com/settings/keys"

    def _get_client(self) -> AsyncAnthropic:
        if self._client is None:
            api_key = self._resolve_api_key()
            self._client = AsyncAnthropic(api_key=api_key, max_retries=0)
            logger.debug("Created Anthropic client")
        return self._client

    def _build_request(
        self,
        prompt: str,
        model_id: str,
        options: ModelOptions,
        system_prompt: SystemPrompt | None,
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": model_id,
            "max_tokens": options.get("max_tokens") or DEFAULT_MAX_TOKENS,
            "temperature": options.get("temperature", DEFAULT_TEMPERATURE),
            "messages": [{"role": "user", "content": prompt}],
        }
        if system_prompt is not None:
            request["system"] = system_prompt.text

        extra = {
            _to_snake_case(key): value
            for key, value in options.items()
            if key not in _CONSUMED_OPTIONS
        }
        if extra:
            request["extra_body"] = extra

        thinking = options.get("thinking")
        if isinstance(thinking, dict) and thinking.get("type") == "enabled":
            # Extended thinking is rejected by the API unless temperature is 1.
            request["temperature"] = 1
            request["thinking"] = thinking
            # max_tokens must exceed the thinking budget or the call is rejected.
            budget = thinking.get("budget_tokens")
            if isinstance(budget, int) and request["max_tokens"] <= budget:
                request["max_tokens"] = budget + DEFAULT_MAX_TOKENS
                logger.debug(
                    "Raised max_tokens to %d above thinking budget %d",
                    request["max_tokens"],
                    budget,
                )
        return request

    async def generate(
        self,
        prompt: str,
        model_id: str,
        options: ModelOptions | None = None,
        system_prompt: SystemPrompt | None = None,
    ) -> LLMResponse:
        client = self._get_client()
        request = self._build_request(prompt, model_id, options or {}, system_prompt)
        try:
            message = await client.messages.create(**request)
        except Exception as e:
            error = self._classify(e, model_id)
            logger.warning("%s", error.message)
            raise error from e

        text = "\n".join(
            block.text
            for block in (message.content or [])
            if getattr(block, "type", None) == "text"
        )
        usage = message.usage
        return LLMResponse(
            provider=self.provider_id,
            model_id=model_id,
            text=text,
            metadata={
                "usage": {
                    "input_tokens": usage.input_tokens,
                    "output_tokens": usage.output_tokens,
                }
                if usage is not None
                else None,
                "model": message.model,
                "id": message.id,
                "type": message.type,
                "stop_reason": message.stop_reason,
            },
        )

    async def list_models(self, api_key: str | None = None) -> list[LLMAvailableModel]:
        client = (
            AsyncAnthropic(api_key=api_key, max_retries=0)
            if api_key
            else self._get_client()
        )
        try:
            page = await client.models.list()
        except Exception as e:
            raise self._classify(e, operation="list models") from e

        return [
            LLMAvailableModel(
                id=model.id,
                name=model.display_name,
                description=model.display_name or model.id,
                provider=self.provider_id,
            )
            for model in page.data
        ]
