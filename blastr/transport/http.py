"""
HTTP transport for the BLAST URL API.

Each call opens its own aiohttp session, so concurrent searches never share
connection state. Every network, timeout, HTTP-status or body-decoding
failure surfaces as TransportError; nothing is retried here.
"""

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from ..core.errors import TransportError

logger = logging.getLogger(__name__)


class BlastTransport:
    """Thin async client for the two request shapes the poller needs."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 60.0,
        user_agent: Optional[str] = None,
    ):
        self._endpoint = endpoint
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._headers = {"User-Agent": user_agent} if user_agent else {}

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def post_form(self, data: Dict[str, str]) -> str:
        """POST a form-encoded body and return the response text."""
        return await self._request("POST", data=data)

    async def get(self, params: Dict[str, str]) -> str:
        """GET with query parameters and return the response text."""
        return await self._request("GET", params=params)

    async def _request(
        self,
        method: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> str:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout, headers=self._headers) as session:
                async with session.request(method, self._endpoint, params=params, data=data) as response:
                    response.raise_for_status()
                    body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError) as e:
            logger.error(f"{method} {self._endpoint} failed: {e!r}")
            raise TransportError(self._endpoint, e) from e

        logger.debug(f"{method} {self._endpoint} -> {len(body)} bytes")
        return body
