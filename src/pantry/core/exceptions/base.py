"""
Base Exception Class

This module contains the base exception every pantry error inherits from,
plus ConfigurationError, the only error the caching engine raises on its own.
Themed exceptions (cache backend, record store) live in their own modules.
"""

from typing import Any


class PantryError(Exception):
    """
    Base exception for all pantry errors.

    Attributes:
        message: Error message
        model: Name of the stocked model involved (if any)
        details: Additional error details (dict)

    Example:
        raise CacheKeyError(
            "Redis MGET failed",
            model="typicalmodel",
            details={"keys": ["pantry:v1:typicalmodel:v1:#1"]}
        )
    """

    def __init__(
        self, message: str, model: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.model = model
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for structured logging.

        Returns:
            Dict with error_type, message, model, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "model": self.model,
            "details": self.details,
        }

    def with_context(self, **context) -> "PantryError":
        """
        Add additional context to the error details.

        Args:
            **context: Key-value pairs to add to details

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        model_str = f", model='{self.model}'" if self.model else ""
        return f"{self.__class__.__name__}(message='{self.message}'{model_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        model: str | None = None,
        **details
    ) -> "PantryError":
        """
        Create a pantry error from another exception.

        Useful for wrapping third-party exceptions (redis, sqlalchemy) with
        additional context.

        Args:
            exc: Original exception to wrap
            message: Custom message (defaults to original exception message)
            model: Stocked model name
            **details: Additional context to include

        Returns:
            New error instance with wrapped exception details

        Example:
            >>> try:
            ...     await redis.ping()
            ... except redis.ConnectionError as e:
            ...     raise CacheConnectionError.from_exception(e, url="redis://cache:6379/0")
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, model=model, details=error_details)


class ConfigurationError(PantryError):
    """
    Raised when a stocked model is used in a way its configuration forbids.

    Common causes:
    - multi_get_all() on a model that is not restockable
    - Querying an attribute that was never declared with stock_by()
    - Registering the same model name twice
    """
    pass
