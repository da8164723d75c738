"""Custom exception hierarchy for the memex index."""

from __future__ import annotations


class MemexError(Exception):
    """Base exception for all memex errors."""


class ConfigurationError(MemexError):
    """Raised when no embedding provider credential is configured."""


class ProviderError(MemexError):
    """Raised when the embedding provider returns a non-success response.

    Attributes:
        status: HTTP status code, or None for transport failures.
        body: Raw response body text (or the transport error message).
    """

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"Embedding API error: {status} {body}")


class StorageError(MemexError):
    """Raised on backing-store failures (missing session, corrupt vector blob, etc.)."""
