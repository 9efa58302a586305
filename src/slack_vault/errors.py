"""Exception hierarchy for slack-vault.

Transport and API failures from Slack and the summary providers are raised
as typed errors so callers can decide which ones to absorb.
"""

from __future__ import annotations


class SlackVaultError(Exception):
    """Base class for all slack-vault errors."""


class TransportError(SlackVaultError):
    """Raised when an HTTP request fails or returns a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SlackApiError(SlackVaultError):
    """Raised when Slack answers with ``ok: false``."""

    def __init__(self, method: str, code: str) -> None:
        super().__init__(f"Slack API {method} failed: {code}")
        self.method = method
        self.code = code


class ConfigurationError(SlackVaultError):
    """Raised when a required credential or setting is missing."""


class ProviderError(SlackVaultError):
    """Raised when a text-generation provider returns a non-2xx response."""

    def __init__(self, provider: str, status_code: int, message: str) -> None:
        super().__init__(f"{provider} API error: {status_code} - {message}")
        self.provider = provider
        self.status_code = status_code
        self.message = message


class EmptyResponseError(SlackVaultError):
    """Raised when a successful provider response holds no completion."""
