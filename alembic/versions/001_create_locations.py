"""create locations table

Revision ID: 001
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""
from typing import Sequence, Union

from alembic import op


revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # One row per location. `data` carries everything except id and name,
    # currently {"widgets": [...]}, so the widget shape can grow without
    # a migration.
    op.execute("""
        CREATE TABLE IF NOT EXISTS locations (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            data JSONB NOT NULL DEFAULT '{}'::jsonb,
            created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
        );
    """)

    # list() orders by most recently updated
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_locations_updated ON locations(updated_at DESC);
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS locations CASCADE;")
