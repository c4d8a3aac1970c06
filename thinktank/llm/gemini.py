"""Google Gemini adapter for thinktank."""

from __future__ import annotations

import logging
from typing import Any

import google.generativeai as genai
import httpx

from thinktank.errors.base import ApiError
from thinktank.llm.base import LLMProvider
from thinktank.llm.models import LLMAvailableModel, LLMResponse, ModelOptions, SystemPrompt

logger = logging.getLogger(__name__)

MODELS_URL = "https://generativelanguage.googleapis.com/v1beta/models"

SAFETY_SETTINGS = [
    {"category": category, "threshold": "BLOCK_MEDIUM_AND_ABOVE"}
    for category in (
        "HARM_CATEGORY_HARASSMENT",
        "HARM_CATEGORY_HATE_SPEECH",
        "HARM_CATEGORY_SEXUALLY_EXPLICIT",
        "HARM_CATEGORY_DANGEROUS_CONTENT",
    )
]

_OPTION_NAMES = {
    "temperature": "temperature",
    "max_tokens": "max_output_tokens",
    "top_p": "top_p",
    "top_k": "top_k",
}


def map_generation_config(options: ModelOptions) -> dict[str, Any]:
    """Translate normalized options into a Gemini ``generation_config`` dict."""
    config: dict[str, Any] = {}
    for key, value in options.items():
        if key == "system_prompt":
            continue
        config[_OPTION_NAMES.get(key, key)] = value
    return config


def build_contents(
    prompt: str, model_id: str, system_prompt: SystemPrompt | None
) -> list[dict[str, Any]]:
    """Attach the system prompt the way each Gemini family accepts it.

    gemini-2.0-flash has no system role, so the text is prepended to the user
    turn. gemini-2.5 models take it as a ``model`` turn. Others get a
    ``system`` turn.
    """
    if system_prompt is None:
        return [{"role": "user", "parts": [{"text": prompt}]}]
    if model_id == "gemini-2.0-flash":
        return [{"role": "user", "parts": [{"text": f"{system_prompt.text}\n\n{prompt}"}]}]
    role = "model" if model_id.startswith("gemini-2.5") else "system"
    return [
        {"role": role, "parts": [{"text": system_prompt.text}]},
        {"role": "user", "parts": [{"text": prompt}]},
    ]


def _extract_text(response: Any) -> str:
    candidates = response.candidates or []
    if not candidates:
        return ""
    content = candidates[0].content
    parts = getattr(content, "parts", None) or []
    return "".join(part.text for part in parts if getattr(part, "text", None))


class GeminiProvider(LLMProvider):
    """Gemini adapter using the google-generativeai async SDK."""

    provider_id = "google"
    display_name = "Google"
    env_var = "GEMINI_API_KEY"
    console_url = "https://aistudio.google.com/app/apikey"

    def _get_client(self):
        # google-generativeai keeps its credentials module-wide; configure once.
        if self._client is None:
            genai.configure(api_key=self._resolve_api_key())
            self._client = genai
            logger.debug("Configured google-generativeai client")
        return self._client

    async def generate(
        self,
        prompt: str,
        model_id: str,
        options: ModelOptions | None = None,
        system_prompt: SystemPrompt | None = None,
    ) -> LLMResponse:
        client = self._get_client()
        try:
            model = client.GenerativeModel(model_id, safety_settings=SAFETY_SETTINGS)
            response = await model.generate_content_async(
                build_contents(prompt, model_id, system_prompt),
                generation_config=map_generation_config(options or {}),
            )
        except Exception as e:
            error = self._classify(e, model_id)
            logger.warning("%s", error.message)
            raise error from e

        candidates = response.candidates or []
        first = candidates[0] if candidates else None
        usage = response.usage_metadata
        return LLMResponse(
            provider=self.provider_id,
            model_id=model_id,
            text=_extract_text(response),
            metadata={
                "finish_reason": first.finish_reason if first is not None else None,
                "safety_ratings": list(first.safety_ratings) if first is not None else [],
                "usage": {
                    "prompt_token_count": usage.prompt_token_count,
                    "candidates_token_count": usage.candidates_token_count,
                    "total_token_count": usage.total_token_count,
                }
                if usage is not None
                else None,
            },
        )

    async def list_models(self, api_key: str | None = None) -> list[LLMAvailableModel]:
        key = api_key or self._resolve_api_key()
        try:
            async with httpx.AsyncClient() as client:
                resp = await client.get(MODELS_URL, params={"key": key}, timeout=30.0)
                resp.raise_for_status()
                data = resp.json()
        except Exception as e:
            raise self._classify(e, operation="list models") from e

        models = data.get("models") if isinstance(data, dict) else None
        if not isinstance(models, list):
            raise ApiError(
                "Invalid response format received from Google list models API",
                provider_id=self.provider_id,
                suggestions=["Try again later; the models endpoint returned unexpected data"],
            )

        available = []
        for model in models:
            name = model["name"]
            available.append(
                LLMAvailableModel(
                    id=name.removeprefix("models/"),
                    name=model.get("displayName"),
                    description=model.get("displayName")
                    or model.get("description")
                    or f"Input token limit: {model.get('inputTokenLimit')}, "
                    f"Output token limit: {model.get('outputTokenLimit')}",
                    provider=self.provider_id,
                    context_window=model.get("inputTokenLimit"),
                )
            )
        return available
