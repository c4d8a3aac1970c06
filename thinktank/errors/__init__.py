"""Error taxonomy, classification patterns and factories."""

from .base import (
    ApiError,
    ConfigError,
    ErrorCategory,
    FileSystemError,
    InputError,
    NetworkError,
    PermissionDeniedError,
    ThinktankError,
    ValidationError,
)
from .categorization import ErrorContext, categorize_error, create_contextual_error
from .factories import (
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
from .patterns import (
    CLASSIFICATION_ORDER,
    PROVIDER_ERROR_PATTERNS,
    detect_error_kind,
    is_provider_auth_error,
    is_provider_content_policy_error,
    is_provider_model_not_found_error,
    is_provider_network_error,
    is_provider_rate_limit_error,
    is_provider_token_limit_error,
)

__all__ = [
    "ApiError",
    "CLASSIFICATION_ORDER",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "FileSystemError",
    "InputError",
    "NetworkError",
    "PROVIDER_ERROR_PATTERNS",
    "PermissionDeniedError",
    "ThinktankError",
    "ValidationError",
    "categorize_error",
    "classify_provider_error",
    "create_contextual_error",
    "create_model_format_error",
    "create_model_not_found_error",
    "create_provider_api_key_missing_error",
    "create_provider_auth_error",
    "create_provider_content_policy_error",
    "create_provider_model_not_found_error",
    "create_provider_network_error",
    "create_provider_rate_limit_error",
    "create_provider_token_limit_error",
    "create_provider_unknown_error",
    "detect_error_kind",
    "is_provider_auth_error",
    "is_provider_content_policy_error",
    "is_provider_model_not_found_error",
    "is_provider_network_error",
    "is_provider_rate_limit_error",
    "is_provider_token_limit_error",
]
