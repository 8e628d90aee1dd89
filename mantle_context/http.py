from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from mantle_context.config import get_settings
from mantle_context.errors import UpstreamHTTPError, UpstreamShapeError

logger = logging.getLogger(__name__)


class HttpClient:
    """Pooled async HTTP client for the upstream feeds.

    Holds connections only; no response is cached between calls. Failures are
    terminal for the call that hit them, there is no retry.
    """

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        limits = httpx.Limits(
            max_connections=settings.HTTP_MAX_CONNECTIONS,
            max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE,
        )
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout or settings.HTTP_TIMEOUT_SECONDS),
            limits=limits,
            transport=transport,
        )

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        logger.debug(f"HTTP GET {url} params={params}")
        try:
            resp = await self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning(f"HTTP GET {url} failed: {e!r}")
            raise UpstreamHTTPError(url, detail=str(e) or type(e).__name__) from e
        if not resp.is_success:
            logger.warning(f"HTTP GET {url} returned {resp.status_code}")
            raise UpstreamHTTPError(url, status_code=resp.status_code)
        return resp

    async def get_json(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        resp = await self.get(url, params=params, headers=headers)
        try:
            return resp.json()
        except ValueError as e:
            logger.warning(f"HTTP GET {url} returned a non-JSON body")
            raise UpstreamShapeError(url, "body is not valid JSON") from e

    async def aclose(self) -> None:
        await self._client.aclose()
