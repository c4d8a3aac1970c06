"""Structured error taxonomy shared by every thinktank subsystem."""

from __future__ import annotations


class ErrorCategory:
    """Display categories for taxonomy errors."""

    API = "API"
    CONFIG = "Configuration"
    NETWORK = "Network"
    FILESYSTEM = "File System"
    PERMISSION = "Permission"
    VALIDATION = "Validation"
    INPUT = "Input"
    UNKNOWN = "Unknown"


class ThinktankError(Exception):
    """Base error carrying a category, an optional cause, and remediation hints.

    ``suggestions`` and ``examples`` are always lists so presentation code can
    iterate them without None checks. ``cause`` is also installed as
    ``__cause__`` so tracebacks show the originating vendor/OS error.
    """

    default_category: str = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        cause: BaseException | None = None,
        suggestions: list[str] | None = None,
        examples: list[str] | None = None,
        category: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.cause = cause
        self.suggestions = list(suggestions or [])
        self.examples = list(examples or [])
        if cause is not None:
            self.__cause__ = cause

    @property
    def name(self) -> str:
        return type(self).__name__

    def format(self) -> str:
        """Render the error as header, suggestions and examples sections."""
        sections = [f"Error ({self.category}): {self.message}"]
        if self.suggestions:
            sections.append(
                "Suggestions:\n" + "\n".join(f"  - {s}" for s in self.suggestions)
            )
        if self.examples:
            sections.append(
                "Examples:\n" + "\n".join(f"  - {e}" for e in self.examples)
            )
        return "\n\n".join(sections)

    def __repr__(self) -> str:
        return f"{self.name}({self.message!r}, category={self.category!r})"


class ApiError(ThinktankError):
    """Vendor call failure. Message is prefixed with ``[provider_id]`` once."""

    default_category = ErrorCategory.API

    def __init__(
        self,
        message: str,
        *,
        provider_id: str | None = None,
        cause: BaseException | None = None,
        suggestions: list[str] | None = None,
        examples: list[str] | None = None,
        category: str | None = None,
    ) -> None:
        if provider_id:
            message = f"[{provider_id}] {message}"
        super().__init__(
            message,
            cause=cause,
            suggestions=suggestions,
            examples=examples,
            category=category,
        )
        self.provider_id = provider_id


class ConfigError(ThinktankError):
    default_category = ErrorCategory.CONFIG


class FileSystemError(ThinktankError):
    default_category = ErrorCategory.FILESYSTEM

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        cause: BaseException | None = None,
        suggestions: list[str] | None = None,
        examples: list[str] | None = None,
        category: str | None = None,
    ) -> None:
        super().__init__(
            message,
            cause=cause,
            suggestions=suggestions,
            examples=examples,
            category=category,
        )
        self.file_path = file_path


class ValidationError(ThinktankError):
    default_category = ErrorCategory.VALIDATION


class NetworkError(ThinktankError):
    default_category = ErrorCategory.NETWORK


class PermissionDeniedError(ThinktankError):
    default_category = ErrorCategory.PERMISSION


class InputError(ThinktankError):
    default_category = ErrorCategory.INPUT
