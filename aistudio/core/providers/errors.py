"""Shared provider error types for cross-vendor normalization."""

from __future__ import annotations


class ProviderMappedError(Exception):
    """Normalized provider exception with a stable error code."""

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class ProviderConfigurationError(ProviderMappedError):
    """Provider settings cannot be turned into a working handle."""

    def __init__(self, message: str) -> None:
        super().__init__("configuration_error", message)


class ProviderTimeoutError(ProviderMappedError):
    """Timeout error normalized across providers."""

    def __init__(self, message: str) -> None:
        super().__init__("timeout", message)


class ProviderConnectionError(ProviderMappedError):
    """Connection-level transport error."""

    def __init__(self, message: str) -> None:
        super().__init__("connection_error", message)


class ProviderRateLimitError(ProviderMappedError):
    """Rate limit exceeded."""

    def __init__(self, message: str) -> None:
        super().__init__("rate_limit", message)


class ProviderAuthenticationError(ProviderMappedError):
    """Missing or rejected credentials."""

    def __init__(self, message: str) -> None:
        super().__init__("authentication_error", message)


class ProviderPermissionDeniedError(ProviderMappedError):
    def __init__(self, message: str) -> None:
        super().__init__("permission_denied", message)


class ProviderInsufficientBalanceError(ProviderMappedError):
    def __init__(self, message: str) -> None:
        super().__init__("insufficient_balance", message)


class ProviderModelNotFoundError(ProviderMappedError):
    def __init__(self, message: str) -> None:
        super().__init__("model_not_found", message)


class ProviderBadRequestError(ProviderMappedError):
    def __init__(self, message: str) -> None:
        super().__init__("bad_request", message)


class ProviderContextLengthExceededError(ProviderMappedError):
    def __init__(self, message: str) -> None:
        super().__init__("context_length_exceeded", message)


class ProviderApiError(ProviderMappedError):
    """Generic upstream API error."""

    def __init__(self, message: str) -> None:
        super().__init__("api_error", message)
