"""Common exception classes for the price synchronization core.

All custom exceptions inherit from ``ApplicationError`` so callers can catch
the whole family at the public boundary.

Exception classes support two patterns:
1. No-argument raise: raise DataError()
2. Contextual attributes: err = RemoteHTTPError(status=503, endpoint="/rpc/x"); raise err
"""

from typing import Any, Optional

from ..config.errors import ConfigurationError


class ApplicationError(Exception):
    """Base exception for all application errors.

    Supports keyword arguments that are stored as attributes for debugging.
    """

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = self.__class__.__doc__ or "Application error occurred"
        super().__init__(message)
        for key, value in kwargs.items():
            setattr(self, key, value)


class ValidationError(ApplicationError):
    """Data validation failed."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Data validation failed"
        super().__init__(message, **kwargs)


class DataError(ApplicationError):
    """Data processing or parsing error."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Data processing or parsing error"
        super().__init__(message, **kwargs)


class NetworkError(ApplicationError):
    """Network communication error."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Network communication error"
        super().__init__(message, **kwargs)


class APIError(ApplicationError):
    """External API error."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "External API error"
        super().__init__(message, **kwargs)


class RemoteHTTPError(APIError):
    """Price API answered with a non-success HTTP status."""

    def __init__(self, status: int, endpoint: str = "", body: Optional[str] = None) -> None:
        message = f"Price API returned HTTP {status}"
        if endpoint:
            message = f"{message} for {endpoint}"
        super().__init__(message, status=status, endpoint=endpoint, body=body)


class PayloadValidationError(ValidationError):
    """Price API payload does not match the expected schema."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Price API payload does not match the expected schema"
        super().__init__(message, **kwargs)


class BackupStoreError(ApplicationError):
    """Durable backup store operation failed."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        if not message:
            message = "Durable backup store operation failed"
        super().__init__(message, **kwargs)


__all__ = [
    "APIError",
    "ApplicationError",
    "BackupStoreError",
    "ConfigurationError",
    "DataError",
    "NetworkError",
    "PayloadValidationError",
    "RemoteHTTPError",
    "ValidationError",
]
