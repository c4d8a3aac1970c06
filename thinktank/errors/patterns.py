"""Pattern table for classifying vendor error messages.

Vendor SDKs rarely expose stable, structured error codes across versions, so
classification matches free text. Every pattern lives in
``PROVIDER_ERROR_PATTERNS``; supporting a new vendor phrasing means adding a
regex here, not editing the adapters.

Matching is permissive on purpose. A message can match several kinds, which is
why adapters walk ``CLASSIFICATION_ORDER`` and take the first hit.
"""

from __future__ import annotations

import re

AUTH = "auth"
RATE_LIMIT = "rate_limit"
MODEL_NOT_FOUND = "model_not_found"
TOKEN_LIMIT = "token_limit"
CONTENT_POLICY = "content_policy"
NETWORK = "network"


def _compile(*patterns: str) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


PROVIDER_ERROR_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    AUTH: _compile(
        r"authentication",
        r"auth",
        r"api[\s_-]?key",
        r"unauthorized",
        r"invalid[\s_]key",
        r"incorrect[\s_]key",
        r"permission[\s_]denied",
        r"\b401\b",
        r"\b403\b",
    ),
    RATE_LIMIT: _compile(
        r"rate[\s_-]?limit",
        r"\b429\b",
        r"too many requests",
        r"quota exceeded",
        r"exceeded your (current )?quota",
        r"resource[\s_]exhausted",
    ),
    MODEL_NOT_FOUND: _compile(
        r"\bmodels?\b.*\bnot (been )?found",
        r"\bmodels?/\S+ is not found",
        r"\bmodels?\b.*\bdoes not exist",
        r"not_found_error",
        r"no such model",
        r"unknown model",
        r"invalid model",
        r"model_not_found",
    ),
    TOKEN_LIMIT: _compile(
        r"token[\s_]limit",
        r"maximum context length",
        r"maximum tokens?",
        r"context[\s_]window",
        r"context[\s_]length",
        r"too many tokens",
        r"max_tokens",
    ),
    CONTENT_POLICY: _compile(
        r"content[\s_]policy",
        r"content[\s_]filter",
        r"safety system",
        r"safety",
        r"violates",
        r"harmful",
        r"inappropriate",
        r"prohibited",
        r"blocked",
    ),
    NETWORK: _compile(
        r"network",
        r"connection",
        r"connect",
        r"timeout",
        r"timed out",
        r"econnrefused",
        r"econnreset",
        r"etimedout",
        r"socket",
        r"\bdns\b",
    ),
}

# Auth first: "invalid api key" must not fall through to a generic bucket.
# Model before token limit: both commonly mention "model".
CLASSIFICATION_ORDER: tuple[str, ...] = (
    AUTH,
    RATE_LIMIT,
    MODEL_NOT_FOUND,
    TOKEN_LIMIT,
    CONTENT_POLICY,
    NETWORK,
)


def matches_error_kind(kind: str, message: str) -> bool:
    """Return True if *message* matches any pattern registered for *kind*."""
    patterns = PROVIDER_ERROR_PATTERNS.get(kind, ())
    return any(p.search(message) for p in patterns)


def detect_error_kind(message: str) -> str | None:
    """Return the first matching kind in ``CLASSIFICATION_ORDER``, or None."""
    for kind in CLASSIFICATION_ORDER:
        if matches_error_kind(kind, message):
            return kind
    return None


def is_provider_auth_error(message: str) -> bool:
    return matches_error_kind(AUTH, message)


def is_provider_rate_limit_error(message: str) -> bool:
    return matches_error_kind(RATE_LIMIT, message)


def is_provider_model_not_found_error(message: str) -> bool:
    return matches_error_kind(MODEL_NOT_FOUND, message)


def is_provider_token_limit_error(message: str) -> bool:
    return matches_error_kind(TOKEN_LIMIT, message)


def is_provider_content_policy_error(message: str) -> bool:
    return matches_error_kind(CONTENT_POLICY, message)


def is_provider_network_error(message: str) -> bool:
    return matches_error_kind(NETWORK, message)
