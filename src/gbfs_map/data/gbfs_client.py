from typing import Any

import httpx

from gbfs_map.data.config import MapConfig
from gbfs_map.data.rate_limiter import RateLimiter


class GBFSClient:
    """Async HTTP client for fetching GBFS JSON documents.

    Requests are spaced out by a shared RateLimiter.

    Usage:
        async with GBFSClient(config) as client:
            discovery = await client.fetch_json("https://example.com/gbfs.json")
    """

    def __init__(self, config: MapConfig, rate_limiter: RateLimiter | None = None):
        """Initialize the client.

        Args:
            config: Map configuration with request timeout and spacing.
            rate_limiter: Limiter to share with other clients; a private one
                is created when omitted.
        """
        self._config = config
        self._rate_limiter = rate_limiter or RateLimiter(config.min_request_interval_seconds)
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GBFSClient":
        """Enter async context - create HTTP client."""
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self._config.request_timeout_seconds,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context - close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_json(self, url: str) -> Any:
        """Fetch and decode one JSON document.

        Args:
            url: Absolute URL of the document.

        Returns:
            The decoded JSON value.

        Raises:
            RuntimeError: If client not initialized.
            httpx.HTTPError: If the HTTP request fails.
            ValueError: If the body is not valid JSON.
        """
        if not self._client:
            raise RuntimeError("Client not initialized - use 'async with'")

        await self._rate_limiter.acquire()
        response = await self._client.get(url)
        response.raise_for_status()
        return response.json()
