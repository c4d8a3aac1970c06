"""Tests for thinktank.errors.factories: factory errors and classification."""

from unittest.mock import Mock

import pytest
from anthropic import RateLimitError as AnthropicRateLimitError
from openai import APIError as OpenAIAPIError

from thinktank.errors import (
    ApiError,
    ConfigError,
    classify_provider_error,
    create_model_format_error,
    create_model_not_found_error,
    create_provider_api_key_missing_error,
    create_provider_auth_error,
    create_provider_content_policy_error,
    create_provider_model_not_found_error,
    create_provider_network_error,
    create_provider_rate_limit_error,
    create_provider_token_limit_error,
    create_provider_unknown_error,
)

# ---------------------------------------------------------------------------
# Provider factories
# ---------------------------------------------------------------------------


class TestProviderFactories:
    def test_api_key_missing_names_env_var_and_console(self):
        err = create_provider_api_key_missing_error(
            "openai", "OpenAI", "https://platform.openai.com/api-keys", "OPENAI_API_KEY"
        )
        assert isinstance(err, ApiError)
        assert err.provider_id == "openai"
        assert "API key is missing" in err.message
        assert "OPENAI_API_KEY" in err.message
        assert any("https://platform.openai.com/api-keys" in s for s in err.suggestions)
        assert err.examples

    def test_api_key_missing_default_env_var(self):
        err = create_provider_api_key_missing_error("x", "Acme", "https://acme.test")
        assert "ACME_API_KEY" in err.message

    def test_api_key_missing_without_provider_name(self):
        err = create_provider_api_key_missing_error("acme", None, "https://acme.test")
        assert err.message.startswith("[acme] acme API key is missing")
        assert "ACME_API_KEY" in err.message

    @pytest.mark.parametrize(
        "factory, fragment",
        [
            (create_provider_auth_error, "API key error"),
            (create_provider_rate_limit_error, "Rate limit exceeded"),
            (create_provider_token_limit_error, "Token limit exceeded"),
            (create_provider_content_policy_error, "Content policy violation"),
            (create_provider_network_error, "Network error"),
        ],
    )
    def test_cause_factories(self, factory, fragment):
        original = RuntimeError("vendor said no")
        err = factory("anthropic", "Anthropic", original)
        assert err.message.startswith("[anthropic] ")
        assert fragment in err.message
        assert "vendor said no" in err.message
        assert err.cause is original
        assert err.suggestions

    def test_rate_limit_suggests_backoff(self):
        err = create_provider_rate_limit_error("openai", "OpenAI", RuntimeError("429"))
        assert any("backoff" in s for s in err.suggestions)

    def test_token_limit_suggests_max_tokens(self):
        err = create_provider_token_limit_error("openai", "OpenAI", RuntimeError("x"))
        assert any("max_tokens" in s for s in err.suggestions)

    def test_model_not_found_lists_alternatives(self):
        err = create_provider_model_not_found_error(
            "openai", "OpenAI", "gpt-5", available_models=["gpt-4o", "gpt-4o-mini"]
        )
        assert "gpt-5" in err.message
        assert any("gpt-4o, gpt-4o-mini" in s for s in err.suggestions)

    def test_model_not_found_without_alternatives(self):
        err = create_provider_model_not_found_error("openai", "OpenAI", "gpt-5")
        assert err.suggestions

    def test_unknown_error_always_has_suggestions(self):
        err = create_provider_unknown_error("google", "Google")
        assert "Unknown error occurred while generating text from Google" in err.message
        assert err.suggestions
        assert err.cause is None


# ---------------------------------------------------------------------------
# classify_provider_error
# ---------------------------------------------------------------------------


class TestClassifyProviderError:
    def test_same_provider_api_error_returned_unchanged(self):
        original = ApiError("already classified", provider_id="openai")
        assert classify_provider_error("openai", "OpenAI", original) is original

    def test_other_provider_api_error_is_rewrapped(self):
        original = ApiError("rate limit", provider_id="anthropic")
        err = classify_provider_error("openai", "OpenAI", original)
        assert err is not original
        assert err.provider_id == "openai"
        assert err.cause is original

    def test_non_exception_becomes_unknown(self):
        err = classify_provider_error("openai", "OpenAI", "a string was thrown")
        assert "Unknown error occurred" in err.message
        assert err.suggestions

    def test_none_becomes_unknown(self):
        err = classify_provider_error("openai", "OpenAI", None)
        assert err.provider_id == "openai"
        assert err.suggestions

    def test_sdk_rate_limit_error(self):
        vendor = AnthropicRateLimitError(message="rate limit", response=Mock(), body=None)
        err = classify_provider_error("anthropic", "Anthropic", vendor)
        assert "Rate limit exceeded" in err.message
        assert err.cause is vendor

    def test_sdk_generic_error_falls_back_to_vendor_message(self):
        vendor = OpenAIAPIError(message="something odd", request=Mock(), body=None)
        err = classify_provider_error("openai", "OpenAI", vendor)
        assert err.message == "[openai] something odd"
        assert err.suggestions

    @pytest.mark.parametrize(
        "text, fragment",
        [
            ("Invalid API key provided", "API key error"),
            ("429 Too Many Requests", "Rate limit exceeded"),
            ("maximum context length is 8192 tokens", "Token limit exceeded"),
            ("Output blocked by content filter", "Content policy violation"),
            ("Connection reset by peer", "Network error"),
        ],
    )
    def test_classifies_by_message(self, text, fragment):
        err = classify_provider_error("openai", "OpenAI", RuntimeError(text))
        assert fragment in err.message

    def test_model_not_found_uses_model_id(self):
        err = classify_provider_error(
            "openai", "OpenAI", RuntimeError("The model gpt-5 does not exist"), "gpt-5"
        )
        assert "Model 'gpt-5' not found" in err.message

    @pytest.mark.parametrize(
        "provider_id, provider_name, text, model_id",
        [
            (
                "anthropic",
                "Anthropic",
                "Error code: 404 - {'type': 'error', 'error': "
                "{'type': 'not_found_error', 'message': 'model: claude-3-foo'}}",
                "claude-3-foo",
            ),
            (
                "google",
                "Google",
                "404 models/gemini-x is not found for API version v1beta, or is not "
                "supported for generateContent. Call ListModels to see the list of "
                "available models and their supported methods.",
                "gemini-x",
            ),
        ],
    )
    def test_vendor_404_text_is_model_not_found(
        self, provider_id, provider_name, text, model_id
    ):
        err = classify_provider_error(provider_id, provider_name, RuntimeError(text), model_id)
        assert err.message == (
            f"[{provider_id}] Model '{model_id}' not found for {provider_name} provider"
        )

    def test_missing_provider_name_falls_back_to_id(self):
        err = classify_provider_error("acme", None, RuntimeError("invalid api key"))
        assert err.examples == ["export ACME_API_KEY=your_new_api_key"]

    def test_model_not_found_without_model_id_falls_back(self):
        err = classify_provider_error(
            "openai", "OpenAI", RuntimeError("unknown model"), operation="list models"
        )
        assert err.message == "[openai] Error during list models: unknown model"

    def test_auth_takes_priority(self):
        err = classify_provider_error(
            "openai", "OpenAI", RuntimeError("401 unauthorized: rate limit")
        )
        assert "API key error" in err.message

    def test_auth_example_uses_env_var(self):
        err = classify_provider_error(
            "google", "Google", RuntimeError("API key not valid"), env_var="GEMINI_API_KEY"
        )
        assert err.examples == ["export GEMINI_API_KEY=your_new_api_key"]


# ---------------------------------------------------------------------------
# Config factories
# ---------------------------------------------------------------------------


class TestConfigFactories:
    def test_missing_colon(self):
        err = create_model_format_error("gpt-4o", ["openai"], ["openai:gpt-4o"])
        assert isinstance(err, ConfigError)
        assert err.category == "Configuration"
        assert 'Invalid model format: "gpt-4o"' in err.message
        assert any('"provider:gpt-4o"' in s for s in err.suggestions)
        assert any("Available providers: openai" in s for s in err.suggestions)
        assert err.examples

    def test_missing_model_id(self):
        err = create_model_format_error(
            "openai:", ["openai"], ["openai:gpt-4o", "anthropic:claude"]
        )
        assert "Missing model ID" in err.message
        assert any("Available models for openai: openai:gpt-4o" in s for s in err.suggestions)

    def test_missing_provider(self):
        err = create_model_format_error(":gpt-4o")
        assert "Missing provider name" in err.message

    def test_model_not_found_same_provider(self):
        err = create_model_not_found_error(
            "openai:gpt-5", ["openai:gpt-4o", "anthropic:claude-3"]
        )
        assert 'Model "openai:gpt-5" not found in configuration.' == err.message
        assert any("Available models from openai: openai:gpt-4o" in s for s in err.suggestions)

    def test_model_not_found_unknown_provider(self):
        err = create_model_not_found_error("mistral:large", ["openai:gpt-4o"])
        assert any('Provider "mistral" not found.' in s for s in err.suggestions)
        assert any("Available providers: openai" in s for s in err.suggestions)

    def test_model_not_found_in_group(self):
        err = create_model_not_found_error("openai:gpt-5", [], "coding")
        assert 'not found in group "coding"' in err.message
        assert any('"coding" group' in s for s in err.suggestions)
