"""Best-effort wrapping of arbitrary exceptions into taxonomy errors."""

from __future__ import annotations

import errno
import logging

from pydantic import BaseModel

from thinktank.errors.base import (
    ApiError,
    ErrorCategory,
    FileSystemError,
    NetworkError,
    PermissionDeniedError,
    ThinktankError,
    ValidationError,
)
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

_KIND_CATEGORIES = {
    AUTH: ErrorCategory.API,
    RATE_LIMIT: ErrorCategory.API,
    MODEL_NOT_FOUND: ErrorCategory.API,
    TOKEN_LIMIT: ErrorCategory.API,
    CONTENT_POLICY: ErrorCategory.API,
    NETWORK: ErrorCategory.NETWORK,
}


class ErrorContext(BaseModel):
    """Optional hints describing what was happening when an error occurred."""

    operation: str | None = None
    file_path: str | None = None
    provider_id: str | None = None
    model_id: str | None = None


def categorize_error(exc: BaseException) -> str:
    """Return the ``ErrorCategory`` that best describes *exc*."""
    if isinstance(exc, ThinktankError):
        return exc.category
    if isinstance(exc, PermissionError):
        return ErrorCategory.PERMISSION
    if isinstance(exc, (FileNotFoundError, IsADirectoryError, NotADirectoryError)):
        return ErrorCategory.FILESYSTEM
    if isinstance(exc, OSError) and exc.errno in (errno.EACCES, errno.EPERM):
        return ErrorCategory.PERMISSION
    if isinstance(exc, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK
    if isinstance(exc, OSError) and exc.errno is not None:
        return ErrorCategory.FILESYSTEM

    kind = detect_error_kind(str(exc).lower())
    if kind is not None:
        return _KIND_CATEGORIES[kind]
    if isinstance(exc, (ValueError, TypeError, KeyError)):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


def create_contextual_error(
    exc: BaseException, context: ErrorContext | None = None
) -> ThinktankError:
    """Wrap *exc* in the taxonomy error matching its category.

    Taxonomy errors pass through unchanged. The result always carries at
    least one suggestion so the CLI never prints a bare message.
    """
    if isinstance(exc, ThinktankError):
        return exc

    context = context or ErrorContext()
    category = categorize_error(exc)
    detail = str(exc) or type(exc).__name__
    where = f" while {context.operation}" if context.operation else ""
    logger.debug("Wrapping %s as %s error", type(exc).__name__, category)

    if category == ErrorCategory.PERMISSION:
        target = context.file_path or getattr(exc, "filename", None)
        return PermissionDeniedError(
            f"Permission denied{where}: {detail}",
            cause=exc,
            suggestions=[
                f"Check the permissions on {target}" if target
                else "Check file and directory permissions",
                "Run the command as a user with access to the path",
            ],
        )
    if category == ErrorCategory.FILESYSTEM:
        target = context.file_path or getattr(exc, "filename", None)
        return FileSystemError(
            f"File system error{where}: {detail}",
            file_path=target,
            cause=exc,
            suggestions=[
                "Check that the path exists and is spelled correctly",
                "Use an absolute path if the relative path is ambiguous",
            ],
        )
    if category == ErrorCategory.NETWORK:
        return NetworkError(
            f"Network error{where}: {detail}",
            cause=exc,
            suggestions=[
                "Check your internet connection",
                "Verify proxy, firewall and DNS settings",
                "Try again later",
            ],
        )
    if category == ErrorCategory.API:
        return ApiError(
            f"API error{where}: {detail}",
            provider_id=context.provider_id,
            cause=exc,
            suggestions=[
                "Check that your API keys are set and valid",
                "Verify the model name with `thinktank models`",
                "Check the provider's status page for outages",
            ],
        )
    if category == ErrorCategory.VALIDATION:
        return ValidationError(
            f"Invalid value{where}: {detail}",
            cause=exc,
            suggestions=["Check the values passed on the command line and in config"],
        )
    return ThinktankError(
        f"Unexpected error{where}: {detail}",
        cause=exc,
        suggestions=[
            "Run again with --verbose for more detail",
            "Report the issue if it persists",
        ],
    )
