"""
The network-call capability bound into widgets as `fetch`.

Widget code calls it like the browser primitive it replaces:

    response = await fetch("https://api.example.com/data", method="POST",
                           headers={"Content-Type": "application/json"},
                           json={"gt": selectedDateGT, "lt": selectedDateLT})
    return response.json()["value"]

Calls are passed straight to httpx. No inspection, no rate limiting.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from engine.kernel.types import Location


class HttpFetch:
    """Async callable over a shared httpx.AsyncClient."""

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float | None = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def __call__(
        self,
        url: str,
        method: str = "GET",
        *,
        headers: dict[str, str] | None = None,
        body: str | bytes | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        if body is not None:
            kwargs["content"] = body
        return await self._client.request(method.upper(), url, headers=headers, **kwargs)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class HttpLocationFetcher:
    """
    Remote strategy backend: GET {api_url}/api/config/{location_id}.
    Returns None on 404, raises on any other failure.
    """

    def __init__(self, api_url: str, client: httpx.AsyncClient | None = None, timeout: float = 10.0):
        self.api_url = api_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def __call__(self, location_id: str) -> Location | None:
        url = f"{self.api_url}/api/config/{quote(location_id, safe='')}"
        res = await self._client.get(url, headers={"Accept": "application/json"})
        if res.status_code == 404:
            return None
        res.raise_for_status()
        return Location.from_dict(res.json())

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
