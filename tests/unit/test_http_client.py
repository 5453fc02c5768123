"""Unit tests for HTTP client wrapper."""

import httpx
import pytest

from storefront_feed.fetcher.http_client import AsyncHTTPClient


class TestAsyncHTTPClient:

    @pytest.mark.asyncio
    async def test_initialization_with_defaults(self):
        async with AsyncHTTPClient() as client:
            assert client.timeout == 10.0
            assert "User-Agent" in client.headers

    @pytest.mark.asyncio
    async def test_custom_headers_merge(self):
        client = AsyncHTTPClient(headers={"Accept": "text/csv"})
        assert client.headers["Accept"] == "text/csv"
        assert client.headers["User-Agent"].startswith("storefront-feed")

    @pytest.mark.asyncio
    async def test_context_manager_lifecycle(self):
        client = AsyncHTTPClient()

        async with client:
            assert client._client is not None

        assert client._client is None

    @pytest.mark.asyncio
    async def test_get_with_mock_transport(self):
        def handler(request):
            return httpx.Response(200, text="name,price\nCup,10\n")

        async with AsyncHTTPClient(transport=httpx.MockTransport(handler)) as client:
            response = await client.get("https://docs.google.com/sheet.csv")

        assert response.status_code == 200
        assert response.text.startswith("name,price")

    @pytest.mark.asyncio
    async def test_get_with_params(self):
        def handler(request):
            assert request.url.params["gid"] == "3"
            return httpx.Response(200, text="ok")

        async with AsyncHTTPClient(transport=httpx.MockTransport(handler)) as client:
            response = await client.get("https://example.com/export", params={"gid": "3"})

        assert response.text == "ok"

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request):
            if request.url.path == "/export":
                return httpx.Response(307, headers={"Location": "https://example.com/data.csv"})
            return httpx.Response(200, text="name\nCup\n")

        async with AsyncHTTPClient(transport=httpx.MockTransport(handler)) as client:
            response = await client.get("https://example.com/export")

        assert response.status_code == 200
        assert response.text == "name\nCup\n"

    @pytest.mark.asyncio
    async def test_get_without_context_raises(self):
        client = AsyncHTTPClient()
        with pytest.raises(RuntimeError, match="not initialized"):
            await client.get("https://example.com")
