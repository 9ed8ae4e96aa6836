"""HTTP session management for the price API."""

import asyncio
import logging
from typing import Dict, Optional

import aiohttp


class PriceApiSessionManager:
    """Owns the aiohttp session used for price API calls."""

    def __init__(
        self,
        service_name: str,
        connection_timeout: float,
        request_timeout: float,
        default_headers: Optional[Dict[str, str]] = None,
    ):
        self.service_name = service_name
        self.connection_timeout = connection_timeout
        self.request_timeout = request_timeout
        self.default_headers = dict(default_headers or {})
        self.session: Optional[aiohttp.ClientSession] = None
        self.logger = logging.getLogger(f"{__name__}.{service_name}")

    async def create_session(self) -> aiohttp.ClientSession:
        """Create HTTP session."""
        if self.session and not self.session.closed:
            await self.close_session()

        timeout = aiohttp.ClientTimeout(
            total=self.request_timeout,
            connect=self.connection_timeout,
        )
        headers = {"User-Agent": f"{self.service_name}-client/1.0", **self.default_headers}

        self.session = aiohttp.ClientSession(
            timeout=timeout,
            headers=headers,
            connector=aiohttp.TCPConnector(
                limit=20,
                limit_per_host=10,
                ttl_dns_cache=300,
                use_dns_cache=True,
            ),
        )
        self.logger.info("HTTP session created")
        return self.session

    async def ensure_session(self) -> aiohttp.ClientSession:
        session = self.get_session()
        if session is None:
            session = await self.create_session()
        return session

    async def close_session(self) -> None:
        """Close HTTP session."""
        if not self.session:
            return

        try:
            if not self.session.closed:
                self.logger.info("Closing HTTP session")
                await asyncio.wait_for(self.session.close(), timeout=5.0)
            else:
                self.logger.debug("HTTP session already closed")
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            self.logger.warning("Error closing HTTP session: %s", exc)
        finally:
            self.session = None

    def get_session(self) -> Optional[aiohttp.ClientSession]:
        """Get current session."""
        return self.session if self.session and not self.session.closed else None


__all__ = ["PriceApiSessionManager"]
