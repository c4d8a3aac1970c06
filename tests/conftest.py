"""Shared test fixtures for thinktank."""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from thinktank.config.models import AppConfig, ModelConfig, ModelGroup
from thinktank.llm.base import LLMProvider
from thinktank.llm.models import LLMResponse, SystemPrompt
from thinktank.llm.registry import ProviderRegistry

PROVIDER_ENV_VARS = (
    "OPENAI_API_KEY",
    "ANTHROPIC_API_KEY",
    "GEMINI_API_KEY",
    "OPENROUTER_API_KEY",
)


class FakeProvider(LLMProvider):
    """In-memory provider that records calls and returns canned text."""

    provider_id = "fake"
    display_name = "Fake"
    env_var = "FAKE_API_KEY"
    console_url = "https://example.com/keys"

    def __init__(self, provider_id: str = "fake", text: str = "fake reply") -> None:
        super().__init__(api_key="fake-key")
        self.provider_id = provider_id
        self.text = text
        self.calls: list[dict] = []

    async def generate(self, prompt, model_id, options=None, system_prompt=None):
        self.calls.append(
            {
                "prompt": prompt,
                "model_id": model_id,
                "options": options,
                "system_prompt": system_prompt,
            }
        )
        return LLMResponse(provider=self.provider_id, model_id=model_id, text=self.text)


@pytest.fixture
def no_api_keys():
    """Run with none of the provider API key variables set."""
    env = {k: v for k, v in os.environ.items() if k not in PROVIDER_ENV_VARS}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def registry(fake_provider):
    reg = ProviderRegistry()
    reg.register_provider(fake_provider)
    return reg


@pytest.fixture
def sample_config():
    gpt = ModelConfig(provider="openai", model_id="gpt-4o", options={"temperature": 0.5})
    claude = ModelConfig(
        provider="anthropic",
        model_id="claude-3-7-sonnet-20250219",
        system_prompt=SystemPrompt(text="Model-level prompt"),
    )
    gemini = ModelConfig(provider="google", model_id="gemini-2.5-pro", enabled=False)
    return AppConfig(
        models=[gpt, claude, gemini],
        groups={
            "coding": ModelGroup(
                name="coding",
                system_prompt=SystemPrompt(text="You are a senior engineer."),
                models=[gpt, claude],
                options={"max_tokens": 2000},
            ),
            "review": ModelGroup(
                name="review",
                system_prompt=SystemPrompt(text="Review carefully."),
                models=[claude],
            ),
        },
    )


@pytest.fixture
def mock_openai_response():
    """Factory for chat.completions responses shaped like the OpenAI SDK's."""

    def _make(content="hello", choices=True):
        response = MagicMock()
        if choices:
            choice = MagicMock()
            choice.message.content = content
            response.choices = [choice]
        else:
            response.choices = []
        response.usage.prompt_tokens = 10
        response.usage.completion_tokens = 5
        response.usage.total_tokens = 15
        response.model = "gpt-4o"
        response.id = "chatcmpl-123"
        response.created = 1700000000
        response.model_extra = {}
        return response

    return _make


@pytest.fixture
def mock_openai_client(mock_openai_response):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=mock_openai_response())
    return client
