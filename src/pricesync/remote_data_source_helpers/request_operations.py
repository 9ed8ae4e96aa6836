"""Price API request operations."""

import logging
from typing import Any, Dict, Mapping, Optional

import orjson

from ..exceptions import PayloadValidationError, RemoteHTTPError
from .session_manager import PriceApiSessionManager

# Constants
HTTP_CLIENT_ERROR_MIN = 400
MAX_ERROR_BODY_LENGTH = 500


def auth_headers(api_key: Optional[str]) -> Dict[str, str]:
    """Headers expected by the PostgREST gateway in front of the price tables."""
    headers = {"Accept": "application/json"}
    if api_key:
        headers["apikey"] = api_key
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


class PriceApiClient:
    """
    Thin JSON-over-HTTP client.

    Raises the raw error for every failure: ``RemoteHTTPError`` for non-2xx
    statuses, ``PayloadValidationError`` for bodies that are not JSON, and
    aiohttp/asyncio errors for transport problems. Classification happens
    further up.
    """

    def __init__(self, base_url: str, session_manager: PriceApiSessionManager):
        self.base_url = base_url.rstrip("/")
        self.session_manager = session_manager
        self.logger = logging.getLogger(f"{__name__}.{session_manager.service_name}")

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        json_body: Optional[Any] = None,
    ) -> Any:
        session = await self.session_manager.ensure_session()
        url = f"{self.base_url}/{path.lstrip('/')}"
        self.logger.debug("Making %s request: %s", method, url)

        kwargs: Dict[str, Any] = {}
        if params:
            kwargs["params"] = dict(params)
        if json_body is not None:
            kwargs["data"] = orjson.dumps(json_body)
            kwargs["headers"] = {"Content-Type": "application/json"}

        async with session.request(method, url, **kwargs) as response:
            body = await response.read()
            if response.status >= HTTP_CLIENT_ERROR_MIN:
                text = body.decode("utf-8", errors="replace")[:MAX_ERROR_BODY_LENGTH]
                raise RemoteHTTPError(response.status, endpoint=path, body=text)

        if not body:
            return None
        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as exc:
            raise PayloadValidationError(f"Response from {path} is not valid JSON", endpoint=path) from exc

    async def close(self) -> None:
        await self.session_manager.close_session()


__all__ = ["PriceApiClient", "auth_headers"]
