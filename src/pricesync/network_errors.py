"""Transport-level failure detection for the price API client.

The error classifier maps anything matched here to Timeout or Network
before looking at HTTP status codes.
"""

import asyncio
import socket

import aiohttp

TIMEOUT_ERROR_TYPES = (
    aiohttp.ServerTimeoutError,
    asyncio.TimeoutError,
    TimeoutError,
    socket.timeout,
)

NETWORK_ERROR_TYPES = (
    aiohttp.ClientConnectorError,
    aiohttp.ClientProxyConnectionError,
    aiohttp.ClientConnectorSSLError,
    aiohttp.ClientConnectorCertificateError,
    aiohttp.ServerDisconnectedError,
    aiohttp.ClientOSError,
    aiohttp.ClientHttpProxyError,
    socket.gaierror,
    ConnectionError,
    OSError,
)


def is_timeout_error(exception: BaseException) -> bool:
    """Return True when the exception represents a request or connect timeout."""
    return isinstance(exception, TIMEOUT_ERROR_TYPES)


def is_network_unreachable_error(exception: BaseException) -> bool:
    """
    Determine if an exception represents a network connectivity failure.

    Timeouts are reported separately by ``is_timeout_error`` even though
    ``TimeoutError`` subclasses ``OSError``.

    Args:
        exception: Exception to check

    Returns:
        True if this is a network-level error that indicates connectivity issues
    """
    if is_timeout_error(exception):
        return False

    if isinstance(exception, NETWORK_ERROR_TYPES):
        return True

    os_error = getattr(exception, "os_error", None)
    return isinstance(os_error, OSError)


__all__ = [
    "NETWORK_ERROR_TYPES",
    "TIMEOUT_ERROR_TYPES",
    "is_network_unreachable_error",
    "is_timeout_error",
]
