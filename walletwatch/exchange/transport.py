"""
HTTP transport used to send signed requests.

The fetch pipeline only needs "send this request, get back status, headers
and body, or a TransportError". AiohttpTransport is the default; tests and
embedding applications can supply their own Transport.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional

import aiohttp

from .exceptions import TransportError
from .models import HTTPResponse
from ..utils.logger import get_logger


logger = get_logger(__name__)


class Transport(ABC):
    """Abstract HTTP transport."""

    @abstractmethod
    async def send(self, method: str, url: str, headers: Dict[str, str]) -> HTTPResponse:
        """
        Send a request and return the raw response.

        Raises:
            TransportError: If no response could be obtained
        """
        pass

    async def close(self) -> None:
        """Release any held connections."""
        pass


class AiohttpTransport(Transport):
    """Transport backed by an aiohttp ClientSession."""

    def __init__(self, timeout: float = 10.0, session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize transport.

        Args:
            timeout: Total request timeout in seconds
            session: Existing session to reuse (not closed by this transport)
        """
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def send(self, method: str, url: str, headers: Dict[str, str]) -> HTTPResponse:
        session = await self._get_session()

        try:
            async with session.request(method, url, headers=headers) as resp:
                body = await resp.read()
                return HTTPResponse(
                    status_code=resp.status,
                    headers=dict(resp.headers),
                    body=body,
                    url=str(resp.url)
                )
        except asyncio.TimeoutError as e:
            logger.warning("Request timed out", url=url.split("?")[0], timeout=self.timeout)
            raise TransportError(f"Request timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            logger.warning("Request failed", url=url.split("?")[0], error=str(e))
            raise TransportError(f"Request failed: {e}") from e

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AiohttpTransport":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
