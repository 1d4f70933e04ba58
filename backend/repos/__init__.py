"""
Repository layer for widgetboard.

All SQL and file I/O for locations lives here and ONLY here.
"""

from backend.repos.location_store import FileLocationStore, LocationStore, open_location_store
from backend.repos.postgres_location_store import PostgresLocationStore

__all__ = [
    "LocationStore",
    "FileLocationStore",
    "PostgresLocationStore",
    "open_location_store",
]
