"""Location routes — list, get, replace-all, upsert, delete, share URL."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from backend.config import settings
from backend.models.location import Location, SuccessResponse, UpsertLocationResponse
from backend.repos.location_store import LocationStore
from engine.kernel import codec
from engine.kernel.errors import PersistenceError, ValidationError
from engine.kernel.types import Location as KernelLocation

logger = logging.getLogger(__name__)

router = APIRouter(tags=["locations"])


def get_store(request: Request) -> LocationStore:
    """The LocationStore selected at startup."""
    return request.app.state.store


@router.get("/api/locations", status_code=200)
async def list_locations(store: LocationStore = Depends(get_store)) -> list[Location]:
    """All locations."""
    try:
        return await store.list()
    except PersistenceError as e:
        logger.error("list locations failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load locations",
        ) from e


@router.get("/api/config/{location_id}", status_code=200)
async def get_location_config(
    location_id: str,
    store: LocationStore = Depends(get_store),
) -> Location:
    """
    One location's configuration. This is the remote-fetch endpoint
    embedded viewers fall back to when they share no storage with the editor.
    """
    try:
        location = await store.get(location_id)
    except PersistenceError as e:
        logger.error("get location %s failed: %s", location_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load location",
        ) from e
    if not location:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return location


@router.post("/api/locations", status_code=200)
async def replace_locations(
    locations: list[Location] = Body(...),
    store: LocationStore = Depends(get_store),
) -> SuccessResponse:
    """Replace the whole set: upsert every given location, delete the rest."""
    try:
        await store.replace_all(locations)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except PersistenceError as e:
        logger.error("replace_all failed: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save locations",
        ) from e
    return SuccessResponse()


@router.put("/api/locations/{location_id}", status_code=200)
async def upsert_location(
    location_id: str,
    location: Location,
    store: LocationStore = Depends(get_store),
) -> UpsertLocationResponse:
    """Create or overwrite one location. The body id must match the path id."""
    if location.id != location_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location ID mismatch")
    try:
        saved = await store.upsert_one(location)
    except PersistenceError as e:
        logger.error("upsert location %s failed: %s", location_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save location",
        ) from e
    return UpsertLocationResponse(location=saved)


@router.delete("/api/locations/{location_id}", status_code=200)
async def delete_location(
    location_id: str,
    store: LocationStore = Depends(get_store),
) -> SuccessResponse:
    """Delete one location. Deleting an unknown id is not an error."""
    try:
        deleted = await store.delete_one(location_id)
    except PersistenceError as e:
        logger.error("delete location %s failed: %s", location_id, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete location",
        ) from e
    if not deleted:
        logger.info("delete location %s: not found", location_id)
    return SuccessResponse()


@router.get("/api/locations/{location_id}/share", status_code=200)
async def share_location(
    location_id: str,
    store: LocationStore = Depends(get_store),
) -> codec.EmbedLink:
    """
    Embed URL for a location. The config is inlined when the URL stays
    under the size limit; otherwise viewers resolve it by id.
    """
    location = await get_location_config(location_id, store)
    kernel_location = KernelLocation.from_dict(location.model_dump())
    return codec.build_embed_url(kernel_location, settings.EMBED_BASE_URL)
