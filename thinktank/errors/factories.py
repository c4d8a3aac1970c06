"""Factory functions that build taxonomy errors for standard failure patterns.

Provider adapters never construct ``ApiError`` ad hoc for the common cases;
they call these factories (usually through :func:`classify_provider_error`)
so wording and remediation stay consistent across vendors.
"""

from __future__ import annotations

import logging

from thinktank.errors.base import ApiError, ConfigError
from thinktank.errors.patterns import (
    AUTH,
    CONTENT_POLICY,
    MODEL_NOT_FOUND,
    NETWORK,
    RATE_LIMIT,
    TOKEN_LIMIT,
    detect_error_kind,
)

logger = logging.getLogger(__name__)

_EXAMPLE_MODELS = [
    "openai:gpt-4o",
    "anthropic:claude-3-7-sonnet-20250219",
    "google:gemini-2.5-pro",
]


def _preview(items: list[str], limit: int) -> str:
    text = ", ".join(items[:limit])
    if len(items) > limit:
        text += ", ..."
    return text


# ---------------------------------------------------------------------------
# Provider (API) errors
# ---------------------------------------------------------------------------


def create_provider_api_key_missing_error(
    provider_id: str,
    provider_name: str | None,
    console_url: str,
    env_var: str | None = None,
) -> ApiError:
    provider_name = provider_name or provider_id
    env_var = env_var or f"{provider_name.upper()}_API_KEY"
    return ApiError(
        f"{provider_name} API key is missing. Set {env_var} environment variable "
        "or provide it when creating the provider.",
        provider_id=provider_id,
        suggestions=[
            f"Set the {env_var} environment variable in your shell or .env file",
            f"Get an API key from the {provider_name} console: {console_url}",
            "Provide the API key directly when creating the provider instance",
        ],
        examples=[
            f"export {env_var}=your_api_key",
            f'{provider_name}Provider(api_key="your_api_key")',
        ],
    )


def create_provider_auth_error(
    provider_id: str,
    provider_name: str | None,
    original: BaseException,
    env_var: str | None = None,
) -> ApiError:
    provider_name = provider_name or provider_id
    env_var = env_var or f"{provider_name.upper()}_API_KEY"
    return ApiError(
        f"API key error: {original}",
        provider_id=provider_id,
        cause=original,
        suggestions=[
            f"Check that your {provider_name} API key is valid and not expired",
            "Ensure the API key has the correct permissions for this model",
            f"Generate a new API key in the {provider_name} console if needed",
        ],
        examples=[f"export {env_var}=your_new_api_key"],
    )


def create_provider_rate_limit_error(
    provider_id: str, provider_name: str, original: BaseException
) -> ApiError:
    return ApiError(
        f"Rate limit exceeded: {original}",
        provider_id=provider_id,
        cause=original,
        suggestions=[
            "Wait before sending additional requests",
            "Retry with exponential backoff",
            f"Reduce the frequency of requests to the {provider_name} API",
            "Consider using a different model with higher rate limits",
        ],
        examples=[
            "for attempt in range(max_retries):",
            "    try:",
            "        return await provider.generate(prompt, model_id)",
            "    except ApiError as exc:",
            "        if not is_provider_rate_limit_error(exc.message.lower()):",
            "            raise",
            "        await asyncio.sleep(2 ** attempt)",
        ],
    )


def create_provider_model_not_found_error(
    provider_id: str,
    provider_name: str,
    model_id: str,
    available_models: list[str] | None = None,
    original: BaseException | None = None,
) -> ApiError:
    suggestions = [
        f"Verify the model ID is correct and supported by {provider_name}",
        "Check available models with `thinktank models`",
    ]
    if available_models:
        suggestions.append(
            f"Available {provider_name} models: {_preview(available_models, 5)}"
        )
    else:
        suggestions.append(f"Try using a different model from {provider_name}")
    return ApiError(
        f"Model '{model_id}' not found for {provider_name} provider",
        provider_id=provider_id,
        cause=original,
        suggestions=suggestions,
    )


def create_provider_token_limit_error(
    provider_id: str, provider_name: str, original: BaseException
) -> ApiError:
    return ApiError(
        f"Token limit exceeded: {original}",
        provider_id=provider_id,
        cause=original,
        suggestions=[
            "Use a shorter prompt or trim the input context",
            "Break your request into smaller chunks",
            "Lower the max_tokens option",
            f"Try a {provider_name} model with a larger context window",
        ],
    )


def create_provider_content_policy_error(
    provider_id: str, provider_name: str, original: BaseException
) -> ApiError:
    return ApiError(
        f"Content policy violation: {original}",
        provider_id=provider_id,
        cause=original,
        suggestions=[
            "Rephrase or remove sensitive content from your prompt",
            f"Check {provider_name}'s content policy guidelines",
            f"{provider_name} applies its own safety filters, which may differ "
            "from other providers",
        ],
    )


def create_provider_network_error(
    provider_id: str, provider_name: str, original: BaseException
) -> ApiError:
    return ApiError(
        f"Network error connecting to {provider_name} API: {original}",
        provider_id=provider_id,
        cause=original,
        suggestions=[
            "Check your internet connection",
            "Verify you can reach the API endpoint (proxy, firewall, DNS)",
            f"Check whether {provider_name} is experiencing downtime",
            "Try again later or use a different provider",
        ],
    )


def create_provider_unknown_error(
    provider_id: str,
    provider_name: str,
    original: object | None = None,
    operation: str = "generate",
) -> ApiError:
    action = "generating text" if operation == "generate" else operation
    cause = original if isinstance(original, BaseException) else None
    return ApiError(
        f"Unknown error occurred while {action} from {provider_name}",
        provider_id=provider_id,
        cause=cause,
        suggestions=[
            "Check your network connection",
            "Verify your environment setup",
            "Try with a simpler prompt or different model",
            f"Check {provider_name} status for service disruptions",
        ],
    )


def _create_generic_provider_error(
    provider_id: str, provider_name: str, original: BaseException, operation: str
) -> ApiError:
    prefix = "" if operation == "generate" else f"Error during {operation}: "
    return ApiError(
        f"{prefix}{original}",
        provider_id=provider_id,
        cause=original,
        suggestions=[
            f"Check the {provider_name} API documentation for more information",
            f"Review the {provider_name} status page for ongoing issues",
            "Ensure your request parameters are valid",
        ],
    )


def classify_provider_error(
    provider_id: str,
    provider_name: str | None,
    error: object,
    model_id: str | None = None,
    *,
    operation: str = "generate",
    env_var: str | None = None,
) -> ApiError:
    """Translate any failure raised at a vendor boundary into an ApiError.

    An ApiError already attributed to *provider_id* is returned unchanged.
    Other exceptions are matched against the pattern table in
    ``CLASSIFICATION_ORDER``; the first hit selects the factory. Values that
    are not exceptions become the unknown error.
    """
    provider_name = provider_name or provider_id
    if isinstance(error, ApiError) and error.provider_id == provider_id:
        return error
    if not isinstance(error, BaseException):
        return create_provider_unknown_error(
            provider_id, provider_name, error, operation=operation
        )

    kind = detect_error_kind(str(error).lower())
    logger.debug(
        "Classified %s %s failure as %s: %s",
        provider_id,
        operation,
        kind or "generic",
        error,
    )
    if kind == AUTH:
        return create_provider_auth_error(provider_id, provider_name, error, env_var)
    if kind == RATE_LIMIT:
        return create_provider_rate_limit_error(provider_id, provider_name, error)
    if kind == MODEL_NOT_FOUND and model_id:
        return create_provider_model_not_found_error(
            provider_id, provider_name, model_id, original=error
        )
    if kind == TOKEN_LIMIT:
        return create_provider_token_limit_error(provider_id, provider_name, error)
    if kind == CONTENT_POLICY:
        return create_provider_content_policy_error(provider_id, provider_name, error)
    if kind == NETWORK:
        return create_provider_network_error(provider_id, provider_name, error)
    return _create_generic_provider_error(provider_id, provider_name, error, operation)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


def create_model_format_error(
    model_spec: str,
    available_providers: list[str] | None = None,
    available_models: list[str] | None = None,
) -> ConfigError:
    """Error for a model reference that is not ``provider:modelId``."""
    available_providers = available_providers or []
    available_models = available_models or []
    provider = model_spec.split(":", 1)[0]

    if ":" not in model_spec:
        message = (
            f'Invalid model format: "{model_spec}". '
            'Model must be specified as "provider:modelId".'
        )
    elif model_spec.endswith(":"):
        message = f'Invalid model format: "{model_spec}". Missing model ID after provider.'
    elif model_spec.startswith(":"):
        message = (
            f'Invalid model format: "{model_spec}". Missing provider name before model ID.'
        )
    else:
        message = f'Model not found: "{model_spec}". Use "provider:modelId" format.'

    suggestions = [
        'Model specifications must use the format "provider:modelId" '
        '(e.g., "openai:gpt-4o")'
    ]
    if ":" not in model_spec:
        suggestions.append(
            f'Add a colon between provider and model ID: "provider:{model_spec}"'
        )
    elif model_spec.endswith(":"):
        suggestions.append(f'Specify a model ID after the provider: "{model_spec}modelId"')
        same_provider = [m for m in available_models if m.startswith(f"{provider}:")]
        if same_provider:
            suggestions.append(
                f"Available models for {provider}: {_preview(same_provider, 3)}"
            )
    elif model_spec.startswith(":"):
        suggestions.append(f'Specify a provider before the model ID: "provider{model_spec}"')

    if available_providers:
        suggestions.append(f"Available providers: {', '.join(available_providers)}")
    if available_models:
        suggestions.append(f"Example models: {_preview(available_models, 5)}")

    return ConfigError(message, suggestions=suggestions, examples=list(_EXAMPLE_MODELS))


def create_model_not_found_error(
    model_spec: str,
    available_models: list[str] | None = None,
    group_name: str | None = None,
) -> ConfigError:
    """Error for a well-formed model reference missing from configuration."""
    available_models = available_models or []
    provider, _, model_id = model_spec.partition(":")

    if group_name:
        message = f'Model "{model_spec}" not found in group "{group_name}".'
    else:
        message = f'Model "{model_spec}" not found in configuration.'

    suggestions: list[str] = []
    if available_models:
        same_provider = [m for m in available_models if m.startswith(f"{provider}:")]
        if same_provider:
            suggestions.append(
                f"Available models from {provider}: {_preview(same_provider, 5)}"
            )
        else:
            suggestions.append(f'Provider "{provider}" not found.')
            providers = sorted({m.split(":", 1)[0] for m in available_models if ":" in m})
            if providers:
                suggestions.append(f"Available providers: {', '.join(providers)}")
        if model_id:
            similar = [
                m for m in available_models if model_id in m.partition(":")[2]
            ]
            if similar:
                suggestions.append(f"Models with similar IDs: {_preview(similar, 3)}")
        suggestions.append(f"Available models: {_preview(available_models, 5)}")

    suggestions.extend(
        [
            "Check your configuration file to ensure the model is properly defined",
            "Models must be enabled in the configuration to be usable",
            'Use "thinktank config path" to locate your configuration file',
        ]
    )
    if group_name:
        suggestions.append(
            f'Ensure the model is included in the "{group_name}" group configuration'
        )

    examples = available_models[:3] if available_models else list(_EXAMPLE_MODELS)
    return ConfigError(message, suggestions=suggestions, examples=examples)
