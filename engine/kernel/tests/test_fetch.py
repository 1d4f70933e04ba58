"""
widgetboard kernel — fetch capability and remote location fetcher
"""

import json

import httpx
import pytest

from engine.kernel.fetch import HttpFetch, HttpLocationFetcher
from engine.kernel.types import Location, Widget

LOCATION = Location(id="loc 1", name="Main", widgets=[Widget(id="w1", name="A", code="return 1")])


def handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/echo":
        return httpx.Response(
            200,
            json={
                "method": request.method,
                "body": request.content.decode(),
                "header": request.headers.get("x-key"),
            },
        )
    if request.url.raw_path == b"/api/config/loc%201":
        return httpx.Response(200, json=LOCATION.to_dict())
    if request.url.path.startswith("/api/config/broken"):
        return httpx.Response(500, json={"detail": "boom"})
    return httpx.Response(404, json={"detail": "Location not found"})


def async_client():
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


class TestHttpFetch:
    @pytest.mark.asyncio
    async def test_json_request(self):
        async with async_client() as client:
            fetch = HttpFetch(client)
            res = await fetch("http://test/echo", method="post", headers={"X-Key": "k"}, json={"a": 1})
            data = res.json()

        assert data["method"] == "POST"
        assert json.loads(data["body"]) == {"a": 1}
        assert data["header"] == "k"

    @pytest.mark.asyncio
    async def test_raw_body(self):
        async with async_client() as client:
            res = await HttpFetch(client)("http://test/echo", method="POST", body="a=1")
        assert res.json()["body"] == "a=1"

    @pytest.mark.asyncio
    async def test_shared_client_not_closed(self):
        async with async_client() as client:
            fetch = HttpFetch(client)
            await fetch.aclose()
            assert not client.is_closed


class TestHttpLocationFetcher:
    @pytest.mark.asyncio
    async def test_found(self):
        async with async_client() as client:
            fetcher = HttpLocationFetcher("http://test/", client=client)
            assert await fetcher("loc 1") == LOCATION

    @pytest.mark.asyncio
    async def test_not_found_is_none(self):
        async with async_client() as client:
            assert await HttpLocationFetcher("http://test", client=client)("missing") is None

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        async with async_client() as client:
            with pytest.raises(httpx.HTTPStatusError):
                await HttpLocationFetcher("http://test", client=client)("broken")
