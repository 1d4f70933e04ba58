"""
Location persistence — one contract, two backends.

    LocationStore           the contract every caller depends on
    FileLocationStore       flat JSON file (this module)
    PostgresLocationStore   transactional relational store (postgres_location_store.py)

The backend is chosen once, at startup, by open_location_store(). Nothing
else in the codebase looks at which backend is active.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from backend.config import Settings
from backend.models.location import Location
from engine.kernel.errors import PersistenceError, ValidationError

logger = logging.getLogger(__name__)


def check_unique_ids(locations: list[Location]) -> None:
    """Reject a bulk write that would duplicate a location id."""
    seen: set[str] = set()
    for location in locations:
        if location.id in seen:
            raise ValidationError(f"Duplicate location id {location.id!r}")
        seen.add(location.id)


class LocationStore:
    """
    Abstract storage interface.

    After replace_all(locations) returns, list() yields exactly `locations`:
    present ids are upserted, absent ids are deleted. A failed replace_all
    raises PersistenceError and leaves the previous contents visible.
    """

    backend: str = "abstract"

    async def list(self) -> list[Location]:
        """All locations. Order is backend-defined and stable within one read."""
        raise NotImplementedError

    async def get(self, location_id: str) -> Location | None:
        """One location, or None if not found."""
        raise NotImplementedError

    async def replace_all(self, locations: list[Location]) -> None:
        """Make the store contain exactly `locations`."""
        check_unique_ids(locations)
        await self._replace_all(locations)

    async def _replace_all(self, locations: list[Location]) -> None:
        raise NotImplementedError

    async def upsert_one(self, location: Location) -> Location:
        """Insert if absent, overwrite name and widgets if present."""
        raise NotImplementedError

    async def delete_one(self, location_id: str) -> bool:
        """Delete by id. Returns False if nothing was deleted."""
        raise NotImplementedError

    async def close(self) -> None:
        pass


class FileLocationStore(LocationStore):
    """
    Locations as a JSON array in one file, kept in file order.

    Every write serializes the full set and swaps it in with one rename, so
    readers never see a half-written file. Writes from this process are
    serialized by a lock; separate processes writing the same file can
    still race.
    """

    backend = "file"

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Create the data directory and an empty file if missing."""
        await asyncio.to_thread(self._initialize_sync)

    def _initialize_sync(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self.path.write_text("[]", encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Cannot initialize {self.path}: {e}") from e

    # -- reads --

    async def list(self) -> list[Location]:
        return await asyncio.to_thread(self._read_sync)

    async def get(self, location_id: str) -> Location | None:
        for location in await self.list():
            if location.id == location_id:
                return location
        return None

    def _read_sync(self) -> list[Location]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            return [Location.model_validate(item) for item in data]
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Cannot read {self.path}: {e}") from e

    # -- writes --

    async def _replace_all(self, locations: list[Location]) -> None:
        async with self._lock:
            await asyncio.to_thread(self._write_sync, locations)
        logger.info("file store: saved %d location(s)", len(locations))

    async def upsert_one(self, location: Location) -> Location:
        async with self._lock:
            locations = await asyncio.to_thread(self._read_sync)
            for i, existing in enumerate(locations):
                if existing.id == location.id:
                    locations[i] = location
                    break
            else:
                locations.append(location)
            await asyncio.to_thread(self._write_sync, locations)
        return location

    async def delete_one(self, location_id: str) -> bool:
        async with self._lock:
            locations = await asyncio.to_thread(self._read_sync)
            remaining = [loc for loc in locations if loc.id != location_id]
            if len(remaining) == len(locations):
                return False
            await asyncio.to_thread(self._write_sync, remaining)
        return True

    def _write_sync(self, locations: list[Location]) -> None:
        payload = json.dumps([loc.model_dump() for loc in locations], indent=2, ensure_ascii=False)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {self.path}: {e}") from e


async def open_location_store(settings: Settings) -> LocationStore:
    """
    Select the backend for this process.

    Postgres when DATABASE_URL is set and reachable with the schema in
    place; otherwise the JSON file at settings.DATA_FILE.
    """
    if settings.use_database:
        from backend import db
        from backend.repos.postgres_location_store import PostgresLocationStore

        pool = None
        try:
            pool = await db.create_pool(settings.DATABASE_URL)
            if not await db.table_exists(pool, "locations"):
                raise PersistenceError("table 'locations' is missing; run `alembic upgrade head`")
            logger.info("Using PostgreSQL database for storage")
            return PostgresLocationStore(pool)
        except Exception as e:
            logger.warning("Failed to connect to PostgreSQL, falling back to file storage: %s", e)
            if pool is not None:
                await pool.close()

    store = FileLocationStore(settings.DATA_FILE)
    await store.initialize()
    logger.info("Using file storage (%s)", store.path)
    return store
