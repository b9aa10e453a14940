"""Core infrastructure (exceptions, logging)."""

from option_quoter.core.exceptions import (
    ConfigurationError,
    DataValidationError,
    NetworkError,
    ProviderError,
    QuoterError,
    RateLimitError,
    StorageError,
    add_context_note,
)

__all__ = [
    "ConfigurationError",
    "DataValidationError",
    "NetworkError",
    "ProviderError",
    "QuoterError",
    "RateLimitError",
    "StorageError",
    "add_context_note",
]
