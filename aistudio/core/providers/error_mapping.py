"""Shared helpers for provider exception mapping."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from aistudio.core.providers.errors import (
    ProviderApiError,
    ProviderAuthenticationError,
    ProviderBadRequestError,
    ProviderConnectionError,
    ProviderContextLengthExceededError,
    ProviderInsufficientBalanceError,
    ProviderMappedError,
    ProviderModelNotFoundError,
    ProviderPermissionDeniedError,
    ProviderRateLimitError,
    ProviderTimeoutError,
)

_TIMEOUT_HINTS = ("timed out", "timeout")
_CONTEXT_HINTS = (
    "context",
    "prompt is too long",
    "input is too long",
    "maximum context length",
)


def is_timeout_message(message: str) -> bool:
    """Return True when an error message describes timeout-like behavior."""
    lowered = message.lower()
    return any(hint in lowered for hint in _TIMEOUT_HINTS)


def map_connection_error(message: str) -> ProviderMappedError:
    if is_timeout_message(message):
        return ProviderTimeoutError(f"Request timed out: {message}")
    return ProviderConnectionError(f"Connection error: {message}")


def map_permission_denied_error(message: str) -> ProviderMappedError:
    """Map permission-denied messages with balance-aware specialization."""
    lowered = message.lower()
    if "balance" in lowered or "insufficient" in lowered:
        return ProviderInsufficientBalanceError(f"Insufficient balance: {message}")
    return ProviderPermissionDeniedError(f"Permission denied: {message}")


def map_bad_request_error(message: str) -> ProviderMappedError:
    lowered = message.lower()
    if any(hint in lowered for hint in _CONTEXT_HINTS):
        return ProviderContextLengthExceededError(f"Context length exceeded: {message}")
    return ProviderBadRequestError(f"Invalid request: {message}")


def map_status_error(status: Any, message: str) -> ProviderMappedError:
    """Map an HTTP status code reported by a vendor SDK."""
    if status == 400:
        return map_bad_request_error(message)
    if status == 401:
        return ProviderAuthenticationError(f"Authentication failed: {message}")
    if status == 403:
        return map_permission_denied_error(message)
    if status == 404:
        return ProviderModelNotFoundError(f"Model not found: {message}")
    if status == 429:
        return ProviderRateLimitError(f"Rate limit exceeded: {message}")
    return ProviderApiError(f"API error ({status}): {message}")


def classify_mapped_error(exc: Exception) -> Optional[tuple[str, str]]:
    """Return normalized (code, message) if exception is already mapped."""
    if isinstance(exc, ProviderMappedError):
        return exc.error_code, str(exc)
    return None


def classify_generic_error(exc: Exception) -> tuple[str, str]:
    """Fallback classification for exceptions no vendor mapper recognized."""
    mapped = classify_mapped_error(exc)
    if mapped:
        return mapped
    if isinstance(exc, asyncio.TimeoutError):
        return "timeout", f"Request timed out: {exc}"
    if isinstance(exc, ConnectionError):
        return "connection_error", f"Connection error: {exc}"
    return "unknown_error", f"Unexpected error ({type(exc).__name__}): {exc}"
