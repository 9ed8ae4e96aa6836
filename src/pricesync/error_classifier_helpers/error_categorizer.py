"""Rule table mapping raw failures onto the error taxonomy."""

from typing import Any, Callable, List, Optional, Tuple

import aiohttp

from ..exceptions import DataError, ValidationError
from ..network_errors import is_network_unreachable_error, is_timeout_error
from .data_classes import ErrorKind

HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404
HTTP_REQUEST_TIMEOUT = 408
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR_MIN = 500

# Codes used by older clients that surface plain error objects instead of exceptions
_NETWORK_CODES = {"NETWORK_ERROR", "ECONNREFUSED", "ENOTFOUND", "ENETUNREACH"}
_TIMEOUT_CODES = {"TIMEOUT", "TIMEOUT_ERROR", "ETIMEDOUT"}


def _error_code(error: Any) -> str:
    code = getattr(error, "code", None)
    return code.upper() if isinstance(code, str) else ""


def extract_status(error: Any) -> Optional[int]:
    """Return the HTTP status attached to ``error`` when it carries one."""
    status = getattr(error, "status", None)
    if isinstance(status, bool) or not isinstance(status, int):
        return None
    return status


def kind_for_status(status: int) -> Optional[ErrorKind]:
    """Map an HTTP status to a kind; success and redirect codes map to ``None``."""
    if status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
        return ErrorKind.AUTH_REQUIRED
    if status == HTTP_NOT_FOUND:
        return ErrorKind.NOT_FOUND
    if status == HTTP_REQUEST_TIMEOUT:
        return ErrorKind.TIMEOUT
    if status == HTTP_TOO_MANY_REQUESTS or status >= HTTP_SERVER_ERROR_MIN:
        return ErrorKind.SERVER_ERROR
    if status >= HTTP_BAD_REQUEST:
        return ErrorKind.VALIDATION_FAILED
    return None


def _check_payload_type(error: Any) -> Optional[ErrorKind]:
    if isinstance(error, aiohttp.ContentTypeError):
        return ErrorKind.VALIDATION_FAILED
    return None


def _check_timeout(error: Any) -> Optional[ErrorKind]:
    if isinstance(error, BaseException) and is_timeout_error(error):
        return ErrorKind.TIMEOUT
    if _error_code(error) in _TIMEOUT_CODES or getattr(error, "name", None) == "TimeoutError":
        return ErrorKind.TIMEOUT
    return None


def _check_status(error: Any) -> Optional[ErrorKind]:
    status = extract_status(error)
    if status is None:
        return None
    return kind_for_status(status)


def _check_network(error: Any) -> Optional[ErrorKind]:
    if isinstance(error, BaseException) and is_network_unreachable_error(error):
        return ErrorKind.NETWORK_UNREACHABLE
    if _error_code(error) in _NETWORK_CODES:
        return ErrorKind.NETWORK_UNREACHABLE
    return None


def _check_validation(error: Any) -> Optional[ErrorKind]:
    # JSON decode errors from json and orjson both subclass ValueError
    if isinstance(error, (ValidationError, DataError, ValueError)):
        return ErrorKind.VALIDATION_FAILED
    return None


KIND_CHECKERS: List[Tuple[str, Callable[[Any], Optional[ErrorKind]]]] = [
    ("payload_type", _check_payload_type),
    ("timeout", _check_timeout),
    ("status", _check_status),
    ("network", _check_network),
    ("validation", _check_validation),
]


class ErrorCategorizer:
    """Runs the ordered rule table; the first matching rule wins."""

    @staticmethod
    def categorize(error: Any) -> ErrorKind:
        for _, checker in KIND_CHECKERS:
            kind = checker(error)
            if kind is not None:
                return kind
        return ErrorKind.UNKNOWN


__all__ = ["ErrorCategorizer", "KIND_CHECKERS", "extract_status", "kind_for_status"]
