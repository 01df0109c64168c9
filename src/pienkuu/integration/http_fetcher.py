"""
HTTP fetcher used by the download action.
"""

import logging
from typing import Any, Optional

import httpx

from ..models.composition_models import NetworkError

logger = logging.getLogger(__name__)


class HttpFetcher:
    """
    Fetches raw bytes over HTTP(S) with a bounded redirect chain.

    Response bodies are returned exactly as received; nothing is decoded
    or parsed.
    """

    def __init__(
        self,
        max_redirects: int = 3,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            max_redirects: Redirects followed before giving up
            timeout: Overall request timeout in seconds
            transport: Optional transport override (tests use MockTransport)
        """
        self.max_redirects = max_redirects
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpFetcher":
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=self.max_redirects,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    async def fetch(self, url: str) -> bytes:
        """
        Download ``url`` and return its body bytes.

        Raises:
            NetworkError: On transport failure, too many redirects or an
                error status code
        """
        if self._client is None:
            # Allow one-off use outside of ``async with``
            async with self:
                return await self.fetch(url)

        logger.debug(f"Fetching {url}")
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.TooManyRedirects as e:
            raise NetworkError(
                f"Too many redirects (limit {self.max_redirects}) fetching {url}",
                url=url,
            ) from e
        except httpx.HTTPStatusError as e:
            raise NetworkError(
                f"HTTP {e.response.status_code} fetching {url}", url=url
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise NetworkError(f"Failed to fetch {url}: {e}", url=url) from e

        logger.info(f"Fetched {len(response.content)} bytes from {response.url}")
        return response.content
