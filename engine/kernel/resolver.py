"""
widgetboard kernel — Config Resolver

Decides which Location an embedded viewer runs against. The viewer may not
share storage with the editor, so several sources are tried in order and
the first one that produces a Location wins:

  1. inline   — the `config` URL parameter, decoded by the codec
  2. cache    — the locally cached location list, selected by id
  3. preview  — the single-slot cache of the last previewed location
  4. remote   — GET /api/config/{id} on the server

Only the remote strategy performs I/O. Caches are explicit objects with a
caller-defined lifetime, passed in rather than read from ambient state.

The chain runs once at initial load. Date changes only re-render.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Literal

from engine.kernel.codec import decode
from engine.kernel.errors import DecodeError
from engine.kernel.types import Location

logger = logging.getLogger(__name__)

RemoteFetch = Callable[[str], Awaitable["Location | None"]]
Source = Literal["inline", "cache", "preview", "remote"]

REMOTE_CONFIG_ENDPOINT = "/api/config/{location_id}"


# ---------------------------------------------------------------------------
# Caches
# ---------------------------------------------------------------------------

class LocationCache:
    """Cached copy of the full location list."""

    def __init__(self, locations: list[Location] | None = None) -> None:
        self._locations: list[Location] = list(locations or [])

    def replace(self, locations: list[Location]) -> None:
        self._locations = list(locations)

    def all(self) -> list[Location]:
        return list(self._locations)

    def get(self, location_id: str) -> Location | None:
        for location in self._locations:
            if location.id == location_id:
                return location
        return None

    def __len__(self) -> int:
        return len(self._locations)


class PreviewSlot:
    """Holds the most recently previewed location, if any."""

    def __init__(self, location: Location | None = None) -> None:
        self._location = location

    def set(self, location: Location) -> None:
        self._location = location

    def get(self) -> Location | None:
        return self._location

    def clear(self) -> None:
        self._location = None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolveRequest:
    location_id: str | None
    encoded_config: str | None


@dataclass(frozen=True)
class Resolution:
    location: Location
    source: Source


@dataclass(frozen=True)
class ConfigUnresolved:
    """No strategy produced a Location."""

    reason: Literal["missing_id", "not_found"]
    message: str
    location_id: str | None = None


def unresolved(location_id: str | None, cross_origin: bool) -> ConfigUnresolved:
    if not location_id:
        return ConfigUnresolved(
            reason="missing_id",
            message=(
                "No configuration found. Configure widgets in the editor and preview them, "
                "or provide a locationId parameter."
            ),
        )
    message = f"No configuration found for location {location_id!r}."
    if cross_origin:
        endpoint = REMOTE_CONFIG_ENDPOINT.format(location_id=location_id)
        message += (
            " This viewer is embedded on a different origin, so the editor's local caches "
            f"are not available here. Serve the configuration from the remote endpoint ({endpoint}) "
            "and make sure the viewer can reach it."
        )
    return ConfigUnresolved(reason="not_found", message=message, location_id=location_id)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

class ResolveStrategy:
    """One source of configuration. Returns None to fall through."""

    source: Source

    async def try_resolve(self, request: ResolveRequest) -> Location | None:
        raise NotImplementedError


class InlineConfigStrategy(ResolveStrategy):
    source: Source = "inline"

    async def try_resolve(self, request: ResolveRequest) -> Location | None:
        if not request.encoded_config:
            return None
        try:
            return decode(request.encoded_config)
        except DecodeError as e:
            logger.warning("inline config ignored: %s", e)
            return None


class CachedLocationStrategy(ResolveStrategy):
    source: Source = "cache"

    def __init__(self, cache: LocationCache) -> None:
        self._cache = cache

    async def try_resolve(self, request: ResolveRequest) -> Location | None:
        if not request.location_id:
            return None
        return self._cache.get(request.location_id)


class PreviewSlotStrategy(ResolveStrategy):
    """
    Accepts the previewed location when no id is known, or when its id
    matches the requested one. A stale preview of another location never
    shadows the remote fetch.
    """

    source: Source = "preview"

    def __init__(self, slot: PreviewSlot) -> None:
        self._slot = slot

    async def try_resolve(self, request: ResolveRequest) -> Location | None:
        location = self._slot.get()
        if location is None:
            return None
        if request.location_id and location.id != request.location_id:
            return None
        return location


class RemoteFetchStrategy(ResolveStrategy):
    source: Source = "remote"

    def __init__(self, fetch_location: RemoteFetch) -> None:
        self._fetch_location = fetch_location

    async def try_resolve(self, request: ResolveRequest) -> Location | None:
        if not request.location_id:
            return None
        try:
            return await self._fetch_location(request.location_id)
        except Exception as e:
            logger.warning("remote config fetch failed for %s: %s", request.location_id, e)
            return None


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class ConfigResolver:
    """Ordered strategy chain with early exit on the first success."""

    def __init__(
        self,
        location_cache: LocationCache | None = None,
        preview_slot: PreviewSlot | None = None,
        remote_fetch: RemoteFetch | None = None,
    ) -> None:
        strategies: list[ResolveStrategy] = [InlineConfigStrategy()]
        if location_cache is not None:
            strategies.append(CachedLocationStrategy(location_cache))
        if preview_slot is not None:
            strategies.append(PreviewSlotStrategy(preview_slot))
        if remote_fetch is not None:
            strategies.append(RemoteFetchStrategy(remote_fetch))
        self.strategies = strategies

    async def resolve(
        self,
        location_id: str | None,
        encoded_config: str | None = None,
        cross_origin: bool = False,
    ) -> Resolution | ConfigUnresolved:
        request = ResolveRequest(
            location_id=location_id or None,
            encoded_config=encoded_config or None,
        )
        for strategy in self.strategies:
            location = await strategy.try_resolve(request)
            if location is not None:
                logger.info("resolved location %s from %s", location.id, strategy.source)
                return Resolution(location=location, source=strategy.source)
        return unresolved(request.location_id, cross_origin)
