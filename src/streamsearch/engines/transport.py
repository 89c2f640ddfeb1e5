"""Byte-stream transport used to fetch engine result pages."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Protocol

import httpx

from streamsearch.core.config import settings
from streamsearch.engines.schemas import EngineRequest

logger = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when a page cannot be fetched or its stream breaks off."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class Transport(Protocol):
    """Anything that turns an engine request into a stream of body chunks."""

    def stream(self, request: EngineRequest) -> AsyncIterator[bytes]: ...


def build_default_client() -> httpx.AsyncClient:
    """Create an HTTP client that looks like a desktop browser."""
    return httpx.AsyncClient(
        headers={"User-Agent": settings.user_agent},
        timeout=settings.request_timeout,
        follow_redirects=True,
    )


class HttpxTransport:
    """Streams response bodies chunk by chunk with httpx."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def stream(self, request: EngineRequest) -> AsyncIterator[bytes]:
        """Yield body chunks as they arrive from the network.

        Args:
            request: The rendered engine request.

        Yields:
            Raw body chunks, in order, of whatever size the network delivers.

        Raises:
            TransportError: On HTTP error status or any connection failure.
        """
        try:
            async with self._client.stream(
                request.method,
                request.url,
                content=request.content,
                headers=request.headers,
            ) as response:
                if response.status_code >= 400:
                    raise TransportError(
                        f"{request.method} {request.url} returned {response.status_code}",
                        status_code=response.status_code,
                    )
                logger.debug(f"Streaming {request.method} {request.url}")
                async for chunk in response.aiter_bytes():
                    yield chunk
        except httpx.HTTPError as e:
            raise TransportError(f"{request.method} {request.url} failed: {e}") from e
