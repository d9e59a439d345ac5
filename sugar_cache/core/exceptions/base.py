"""
Base Exception Class

This module contains the base exception class that all other exceptions
inherit from, plus ConfigurationError. Cache runtime errors live in
``cache.py``.
"""

from typing import Any


class SugarCacheError(Exception):
    """
    Base exception for all cache client errors.

    All custom exceptions inherit from this class to enable:
    - Consistent error handling
    - Structured error logging
    - Rich context for debugging

    Attributes:
        message: Error message
        details: Additional error details (dict)

    Example:
        raise CacheTransportError(
            "Redis pipeline failed",
            details={"namespace": "sugar-cache:users", "operation": "mset"}
        )
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = (details or {}).copy()  # Create a copy to prevent external modification
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging.

        Returns:
            Dict with error_type, message and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }

    def with_context(self, **context) -> "SugarCacheError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        return f"{self.__class__.__name__}(message='{self.message}'{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        **details
    ) -> "SugarCacheError":
        """
        Create an error from another exception.

        Useful for wrapping redis-py exceptions with additional context.

        Example:
            >>> try:
            ...     await redis.get(key)
            ... except RedisError as e:
            ...     raise CacheTransportError.from_exception(e, operation="get", key=key)
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, details=error_details)


class ConfigurationError(SugarCacheError):
    """
    Raised when cache options or decorator bindings are invalid.

    Always raised at construction or decoration time; never retried.
    """
    pass


class InvalidTTLError(ConfigurationError):
    """Raised when a TTL has an unknown unit or does not resolve to a positive duration."""
    pass
