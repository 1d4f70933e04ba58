"""
PostgresLocationStore — the transactional LocationStore backend.

Table (see alembic/versions/001_create_locations.py):

    locations(id TEXT PRIMARY KEY, name TEXT, data JSONB,
              created_at TIMESTAMPTZ, updated_at TIMESTAMPTZ)

`data` holds everything except id and name: {"widgets": [...]}.
"""

from __future__ import annotations

import logging

import asyncpg
from pydantic import ValidationError as ModelValidationError

from backend.models.location import Location
from backend.repos.location_store import LocationStore
from engine.kernel.errors import PersistenceError

logger = logging.getLogger(__name__)

_DB_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

_UPSERT = """
    INSERT INTO locations (id, name, data, updated_at)
    VALUES ($1, $2, $3, now())
    ON CONFLICT (id)
    DO UPDATE SET name = EXCLUDED.name, data = EXCLUDED.data, updated_at = now()
"""


def _row_to_location(row: asyncpg.Record) -> Location:
    """Convert a database row to a Location model."""
    data = row["data"] or {}
    try:
        return Location(id=row["id"], name=row["name"], widgets=data.get("widgets", []))
    except ModelValidationError as e:
        raise PersistenceError(f"Stored location {row['id']!r} is invalid: {e}") from e


def _location_data(location: Location) -> dict:
    return {"widgets": [w.model_dump() for w in location.widgets]}


class PostgresLocationStore(LocationStore):
    """
    replace_all runs in one transaction holding a table lock, so two
    concurrent bulk saves never interleave: the last one to commit wins.
    """

    backend = "postgres"

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def list(self) -> list[Location]:
        """Most recently updated first."""
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch("SELECT id, name, data FROM locations ORDER BY updated_at DESC, id")
        except _DB_ERRORS as e:
            raise PersistenceError(f"Failed to load locations: {e}") from e
        return [_row_to_location(row) for row in rows]

    async def get(self, location_id: str) -> Location | None:
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    "SELECT id, name, data FROM locations WHERE id = $1",
                    location_id,
                )
        except _DB_ERRORS as e:
            raise PersistenceError(f"Failed to load location {location_id!r}: {e}") from e
        return _row_to_location(row) if row else None

    async def _replace_all(self, locations: list[Location]) -> None:
        ids = [loc.id for loc in locations]
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    # Blocks other writers (and other replace_all calls) until commit.
                    await conn.execute("LOCK TABLE locations IN SHARE ROW EXCLUSIVE MODE")
                    for location in locations:
                        await conn.execute(_UPSERT, location.id, location.name, _location_data(location))
                    result = await conn.execute(
                        "DELETE FROM locations WHERE id <> ALL($1::text[])",
                        ids,
                    )
        except _DB_ERRORS as e:
            logger.error("replace_all rolled back: %s", e)
            raise PersistenceError(f"Failed to save locations: {e}") from e
        logger.info("postgres store: saved %d location(s), %s", len(locations), result)

    async def upsert_one(self, location: Location) -> Location:
        try:
            async with self.pool.acquire() as conn:
                await conn.execute(_UPSERT, location.id, location.name, _location_data(location))
        except _DB_ERRORS as e:
            raise PersistenceError(f"Failed to save location {location.id!r}: {e}") from e
        return location

    async def delete_one(self, location_id: str) -> bool:
        try:
            async with self.pool.acquire() as conn:
                result = await conn.execute("DELETE FROM locations WHERE id = $1", location_id)
        except _DB_ERRORS as e:
            raise PersistenceError(f"Failed to delete location {location_id!r}: {e}") from e
        return result == "DELETE 1"

    async def close(self) -> None:
        """Close the connection pool."""
        await self.pool.close()
