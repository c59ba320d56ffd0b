"""Settings API routes."""

from fastapi import APIRouter, Query, status

from app.api.dependencies import ApiKeyServiceDep, CurrentUserId, SessionDep
from app.api.errors import HANDLED_ERRORS, http_error
from app.core.storage.preference_store import PreferenceStore
from app.models.database import Language
from app.models.schemas.settings import (
    ApiKeyCreate,
    ApiKeyStatusResponse,
    PreferencesResponse,
    PreferencesUpdate,
)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/youtube-api-key", response_model=ApiKeyStatusResponse)
async def get_api_key_status(user_id: CurrentUserId, service: ApiKeyServiceDep):
    """
    Report whether the user has a YouTube API key configured.

    The key itself is never returned.
    """
    try:
        return await service.get_status(user_id)
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.post(
    "/youtube-api-key",
    response_model=ApiKeyStatusResponse,
    status_code=status.HTTP_201_CREATED,
)
async def save_api_key(key_data: ApiKeyCreate, user_id: CurrentUserId, service: ApiKeyServiceDep):
    """
    Set or replace the user's YouTube API key.

    The key is checked against the YouTube API, then encrypted before
    storage. It is never returned in responses.
    """
    try:
        return await service.save_api_key(user_id, key_data.api_key)
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.delete("/youtube-api-key", status_code=status.HTTP_204_NO_CONTENT)
async def delete_api_key(
    user_id: CurrentUserId,
    service: ApiKeyServiceDep,
    hard: bool = Query(False, description="Physically delete instead of deactivating"),
):
    """Remove the user's YouTube API key. Succeeds even if none is stored."""
    try:
        await service.delete_api_key(user_id, hard=hard)
    except HANDLED_ERRORS as e:
        raise http_error(e)


@router.get("/preferences", response_model=PreferencesResponse)
async def get_preferences(user_id: CurrentUserId, db: SessionDep):
    """Get the user's interface preferences."""
    try:
        language = await PreferenceStore(db).get_language(user_id)
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return PreferencesResponse(language=language)


@router.put("/preferences", response_model=PreferencesResponse)
async def update_preferences(data: PreferencesUpdate, user_id: CurrentUserId, db: SessionDep):
    """Create or update the user's interface preferences."""
    try:
        language = await PreferenceStore(db).set_language(user_id, Language(data.language))
    except HANDLED_ERRORS as e:
        raise http_error(e)
    return PreferencesResponse(language=language)
