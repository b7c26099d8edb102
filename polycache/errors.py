"""
polycache - Core Error Types

Defines the exception hierarchy for the cache library.
All exceptions inherit from PolycacheError for consistent error handling.

Validation errors (keys, iterables, uncacheable values, configuration) are
raised before any storage call is issued. BackendUnavailableError is raised
by storages and either surfaced or swallowed by the Cache facade, depending
on how the instance was configured.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes attached to every polycache error.

    Used for structured log entries and client-side error handling.
    """

    # Input validation errors
    INVALID_KEY = "INVALID_KEY"
    INVALID_ITERABLE = "INVALID_ITERABLE"
    UNCACHEABLE_VALUE = "UNCACHEABLE_VALUE"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    CACHE_DECODE_FAILURE = "CACHE_DECODE_FAILURE"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"


class PolycacheError(Exception):
    """Base exception for all polycache errors."""

    code: ErrorCode = ErrorCode.CACHE_FAILURE

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": self.__class__.__name__,
            "error_code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(PolycacheError):
    """Raised when configuration is invalid or missing."""

    code = ErrorCode.CONFIGURATION_ERROR


class InvalidConfigurationError(ConfigurationError):
    """Raised when a runtime setting (beta, delta, maximum TTL) is out of range."""

    code = ErrorCode.INVALID_CONFIGURATION

    def __init__(self, setting: str, value: Any, expected: str):
        message = f"Invalid {setting} specified: {value!r}. {expected} is required."
        super().__init__(message, {"setting": setting, "value": repr(value), "expected": expected})
        self.setting = setting


class CacheError(PolycacheError):
    """Base exception for cache-related errors."""

    code = ErrorCode.CACHE_FAILURE


class InvalidKeyError(CacheError):
    """Raised when a logical cache key is not a legal value."""

    code = ErrorCode.INVALID_KEY

    def __init__(self, key: Any, reason: str):
        message = f"Cache key {key!r} is invalid: {reason}"
        super().__init__(message, {"key": repr(key), "reason": reason})
        self.key = key


class InvalidIterableError(CacheError):
    """Raised when a batch operation receives something that is not an iterable of keys or pairs."""

    code = ErrorCode.INVALID_ITERABLE

    def __init__(self, value: Any):
        message = f"Invalid keys: {value!r}. Keys should be an iterable of strings"
        super().__init__(message, {"value_type": type(value).__name__})


class UncacheableValueError(CacheError):
    """Raised when a value cannot be stored (live resource or unserializable payload)."""

    code = ErrorCode.UNCACHEABLE_VALUE

    def __init__(self, value_type: str, reason: str = "Resources cannot be cached."):
        message = f"Value of type {value_type} cannot be cached: {reason}"
        super().__init__(message, {"value_type": value_type, "reason": reason})


class CacheDecodeError(CacheError):
    """Raised when a stored payload cannot be decoded back into an Item."""

    code = ErrorCode.CACHE_DECODE_FAILURE


class BackendUnavailableError(CacheError):
    """
    Raised when a raw storage call fails.

    `transient` separates one-off failures (timeouts, partial reads) from
    total unavailability (no server reachable).
    """

    code = ErrorCode.BACKEND_UNAVAILABLE

    def __init__(
        self,
        backend: str,
        operation: str,
        transient: bool = False,
        details: dict[str, Any] | None = None,
    ):
        message = f"Cache backend {backend} failed during {operation}"
        error_details = dict(details or {})
        error_details.update({"backend": backend, "operation": operation, "transient": transient})
        super().__init__(message, error_details)
        self.backend = backend
        self.operation = operation
        self.transient = transient
