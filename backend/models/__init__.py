"""
Pydantic models for widgetboard.

All data shapes defined here. No imports from db, repos, or routes.
"""

from backend.models.location import (
    HealthResponse,
    Location,
    SuccessResponse,
    UpsertLocationResponse,
    Widget,
)

__all__ = [
    "Location",
    "Widget",
    "SuccessResponse",
    "UpsertLocationResponse",
    "HealthResponse",
]
