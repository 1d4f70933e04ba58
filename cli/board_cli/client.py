"""HTTP client for the widgetboard API."""
from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from engine.kernel.types import Location


class ApiClient:
    """HTTP client for the widgetboard API."""

    def __init__(self, api_url: str, transport: httpx.BaseTransport | None = None):
        self.api_url = api_url.rstrip("/")
        self.client = httpx.Client(timeout=30.0, transport=transport)

    def _headers(self) -> dict:
        """Build request headers."""
        return {"Content-Type": "application/json", "Accept": "application/json"}

    def _url(self, path: str) -> str:
        return f"{self.api_url}{path}"

    def get(self, path: str, params: dict | None = None) -> Any:
        """Make GET request."""
        res = self.client.get(self._url(path), headers=self._headers(), params=params or {})
        res.raise_for_status()
        return res.json()

    def post(self, path: str, data: Any) -> Any:
        """Make POST request."""
        res = self.client.post(self._url(path), json=data, headers=self._headers())
        res.raise_for_status()
        return res.json()

    def put(self, path: str, data: Any) -> Any:
        """Make PUT request."""
        res = self.client.put(self._url(path), json=data, headers=self._headers())
        res.raise_for_status()
        return res.json()

    def delete(self, path: str) -> Any:
        """Make DELETE request."""
        res = self.client.delete(self._url(path), headers=self._headers())
        res.raise_for_status()
        return res.json()

    # -- locations --

    def list_locations(self) -> list[Location]:
        return [Location.from_dict(item) for item in self.get("/api/locations")]

    def get_location(self, location_id: str) -> Location | None:
        """GET /api/config/{id}. None on 404."""
        try:
            return Location.from_dict(self.get(f"/api/config/{quote(location_id, safe='')}"))
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

    def save_locations(self, locations: list[Location]) -> None:
        """Replace the whole set on the server."""
        self.post("/api/locations", [loc.to_dict() for loc in locations])

    def upsert_location(self, location: Location) -> Location:
        result = self.put(f"/api/locations/{quote(location.id, safe='')}", location.to_dict())
        return Location.from_dict(result["location"])

    def delete_location(self, location_id: str) -> None:
        self.delete(f"/api/locations/{quote(location_id, safe='')}")

    def share_link(self, location_id: str) -> dict:
        """{"url": ..., "config_inlined": bool}"""
        return self.get(f"/api/locations/{quote(location_id, safe='')}/share")

    def close(self):
        """Close client."""
        self.client.close()
