"""Rate-limited HTTP access shared by every fetch stage of the pipeline."""

import asyncio
import logging
from typing import Any

import httpx

from rbxapi.exceptions import SchemaLoadError

logger = logging.getLogger(__name__)

__all__ = ['Fetcher']


class Fetcher:
    """Issues GET requests with a cap on how many are in flight at once.

    One instance is shared by discovery, metadata and document fetching, so
    the cap applies to the whole run rather than to each stage.

    Example:
        >>> async with Fetcher(max_concurrent_requests=30) as fetcher:
        ...     meta = await fetcher.get_json('https://users.roblox.com/docs/metadata')
    """

    def __init__(
        self,
        max_concurrent_requests: int = 30,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize the fetcher.

        Args:
            max_concurrent_requests: Maximum number of simultaneous requests.
            timeout: Per-request timeout in seconds, used when no client is given.
            http_client: Optional client to send requests with. A client passed
                in is not closed by the fetcher.
        """
        self._semaphore = asyncio.Semaphore(max_concurrent_requests)
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            follow_redirects=True, timeout=timeout
        )

    async def get(self, url: str) -> httpx.Response:
        """Send a GET request once a slot is free.

        Raises:
            SchemaLoadError: The request failed or returned an error status.
        """
        async with self._semaphore:
            try:
                response = await self._client.get(url)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise SchemaLoadError(url, cause=e)
        return response

    async def get_text(self, url: str) -> str:
        return (await self.get(url)).text

    async def get_json(self, url: str) -> Any:
        response = await self.get(url)
        try:
            return response.json()
        except ValueError as e:
            raise SchemaLoadError(url, cause=e)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> 'Fetcher':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
