"""
Database connection pool for the Postgres backend.

Only used when DATABASE_URL is set. The schema is owned by alembic
(`alembic upgrade head`); startup only checks that it is there.
Never use asyncpg.create_pool() directly outside this module.
"""

from __future__ import annotations

import json
import logging

import asyncpg

from backend.config import settings

logger = logging.getLogger(__name__)


async def create_pool(dsn: str | None = None) -> asyncpg.Pool:
    """
    Create a connection pool.
    Called once at application startup, and only when Postgres is selected.
    The owner closes it (PostgresLocationStore.close()).
    """
    return await asyncpg.create_pool(
        dsn=dsn or settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN,
        max_size=settings.DB_POOL_MAX,
        command_timeout=60,
        init=_init_connection,
    )


async def _init_connection(conn: asyncpg.Connection) -> None:
    """
    Initialize each new connection.
    JSONB decodes to Python dict/list.
    """
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


async def table_exists(pool: asyncpg.Pool, table: str) -> bool:
    """Probe for a table in the public schema."""
    async with pool.acquire() as conn:
        found = await conn.fetchval("SELECT to_regclass($1) IS NOT NULL", f"public.{table}")
    logger.info("table %s exists: %s", table, found)
    return bool(found)
