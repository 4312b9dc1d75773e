# src/provider/base_provider.py - v1
"""Abstract translation provider interface and its error types.

Adapters raise the errors below so the retry policy can tell a rate limit
from an authentication problem without parsing vendor messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from tabilingo.core.models import ProviderUsage


class ProviderError(Exception):
    """A provider call failed."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ProviderRateLimitError(ProviderError):
    """Too many requests (HTTP 429)."""


class ProviderAuthError(ProviderError):
    """Credentials rejected. Not retryable."""


class ProviderQuotaExhaustedError(ProviderError):
    """Account character quota exhausted. Not retryable."""


class BaseTranslationProvider(ABC):
    """Unified interface for machine-translation vendors."""

    @abstractmethod
    async def translate(self, text: str, source_code: str, target_code: str) -> str:
        """Translate one request-sized text between provider language codes."""

    @abstractmethod
    async def get_usage(self) -> ProviderUsage:
        """Current billing-period character usage."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (deepl, ...)."""

    async def close(self) -> None:
        """Release network resources. No-op by default."""
