"""Data classes for error classification."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Failure taxonomy for price API operations."""

    NETWORK_UNREACHABLE = "network_unreachable"
    TIMEOUT = "timeout"
    SERVER_ERROR = "server_error"
    AUTH_REQUIRED = "auth_required"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    UNKNOWN = "unknown"


RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK_UNREACHABLE, ErrorKind.TIMEOUT, ErrorKind.SERVER_ERROR})

USER_MESSAGES = {
    ErrorKind.NETWORK_UNREACHABLE: "Please check your network connection.",
    ErrorKind.TIMEOUT: "The request timed out.",
    ErrorKind.SERVER_ERROR: "The price server is having a temporary problem.",
    ErrorKind.AUTH_REQUIRED: "You do not have permission to access this data.",
    ErrorKind.NOT_FOUND: "The requested price data could not be found.",
    ErrorKind.VALIDATION_FAILED: "The price data has an invalid format.",
    ErrorKind.UNKNOWN: "Price data is temporarily unavailable.",
}


@dataclass(frozen=True)
class ClassifiedError:
    """Normalized view of a raw failure."""

    kind: ErrorKind
    retryable: bool
    user_message: str
    status: Optional[int] = None
    error_type: str = ""
    detail: str = ""

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        *,
        status: Optional[int] = None,
        error_type: str = "",
        detail: str = "",
    ) -> "ClassifiedError":
        return cls(
            kind=kind,
            retryable=kind in RETRYABLE_KINDS,
            user_message=USER_MESSAGES[kind],
            status=status,
            error_type=error_type,
            detail=detail,
        )

    def describe(self) -> str:
        if self.kind is ErrorKind.SERVER_ERROR and self.status is not None:
            return f"{self.kind.value}({self.status})"
        return self.kind.value


__all__ = ["ClassifiedError", "ErrorKind", "RETRYABLE_KINDS", "USER_MESSAGES"]
