"""
widgetboard configuration — all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os
from pathlib import Path


class Settings:
    """Application settings from environment variables."""

    # Database. When set, the Postgres backend is tried first; otherwise the
    # flat JSON file is used.
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    DB_POOL_MIN: int = int(os.environ.get("DB_POOL_MIN", "1"))
    DB_POOL_MAX: int = int(os.environ.get("DB_POOL_MAX", "10"))

    # Flat-file backend
    DATA_FILE: Path = Path(os.environ.get("DATA_FILE", "data/locations.json"))

    # Embedding
    EMBED_PATH: str = os.environ.get("EMBED_PATH", "/embed")

    # Logging
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")

    @property
    def PUBLIC_URL(self) -> str:
        url = os.environ.get("PUBLIC_URL")
        if url:
            return url.rstrip("/")
        return "http://localhost:8000"

    @property
    def EMBED_BASE_URL(self) -> str:
        """Base of share URLs; query parameters are appended by the codec."""
        return f"{self.PUBLIC_URL}/{self.EMBED_PATH.lstrip('/')}"

    @property
    def use_database(self) -> bool:
        return bool(self.DATABASE_URL)


# Singleton instance
settings = Settings()
