"""Helper modules for the remote price data source."""

from .request_operations import PriceApiClient, auth_headers
from .session_manager import PriceApiSessionManager

__all__ = ["PriceApiClient", "PriceApiSessionManager", "auth_headers"]
