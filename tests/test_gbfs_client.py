"""Tests for the GBFS HTTP client."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from gbfs_map.data.config import MapConfig
from gbfs_map.data.gbfs_client import GBFSClient


@pytest.fixture
def config() -> MapConfig:
    """Create a test config."""
    return MapConfig(request_timeout_seconds=5.0, min_request_interval_seconds=0.0)


@pytest.mark.asyncio
async def test_fetch_json(config: MapConfig):
    """fetch_json returns the decoded body and waits on the rate limiter."""
    mock_response = MagicMock()
    mock_response.json.return_value = {"data": {"feeds": []}}
    rate_limiter = MagicMock()
    rate_limiter.acquire = AsyncMock()

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=mock_response)
        mock_client_class.return_value = mock_client

        async with GBFSClient(config, rate_limiter) as client:
            data = await client.fetch_json("https://gbfs.example.com/gbfs.json")

    assert data == {"data": {"feeds": []}}
    rate_limiter.acquire.assert_awaited_once()
    mock_client.get.assert_awaited_once_with("https://gbfs.example.com/gbfs.json")
    mock_client.aclose.assert_awaited_once()

    kwargs = mock_client_class.call_args.kwargs
    assert kwargs["timeout"] == 5.0
    assert kwargs["follow_redirects"] is True


@pytest.mark.asyncio
async def test_fetch_json_raises_http_errors(config: MapConfig):
    """HTTP error statuses propagate to the caller."""
    mock_response = MagicMock()
    mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
        "404 Not Found", request=MagicMock(), response=MagicMock()
    )

    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=mock_response)
        mock_client_class.return_value = mock_client

        async with GBFSClient(config) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.fetch_json("https://gbfs.example.com/missing.json")


@pytest.mark.asyncio
async def test_fetch_json_requires_context(config: MapConfig):
    """Calling fetch_json outside `async with` is a usage error."""
    client = GBFSClient(config)
    with pytest.raises(RuntimeError, match="not initialized"):
        await client.fetch_json("https://gbfs.example.com/gbfs.json")
