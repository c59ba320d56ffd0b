"""Shared FastAPI dependencies."""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security.encryption import KeyEncryptionService, get_encryption_service
from app.core.storage.credential_store import CredentialStore
from app.core.storage.database import get_db
from app.core.youtube.client import YouTubeClient
from app.services.api_key_service import ApiKeyService, YouTubeClientFactory

# db session dependency
SessionDep = Annotated[AsyncSession, Depends(get_db)]


def get_current_user_id(
    x_user_id: Annotated[Optional[str], Header(max_length=64)] = None,
) -> str:
    """
    Identify the caller.

    Login happens in the authenticating proxy in front of this service,
    which forwards the user's identifier in the ``X-User-Id`` header.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return x_user_id.strip()


CurrentUserId = Annotated[str, Depends(get_current_user_id)]


def get_youtube_client_factory() -> YouTubeClientFactory:
    """Dependency returning a factory for upstream clients."""

    def factory(api_key: str) -> YouTubeClient:
        return YouTubeClient.from_settings(api_key, settings)

    return factory


def get_api_key_service(
    db: SessionDep,
    encryption: Annotated[KeyEncryptionService, Depends(get_encryption_service)],
    youtube_client_factory: Annotated[YouTubeClientFactory, Depends(get_youtube_client_factory)],
) -> ApiKeyService:
    return ApiKeyService(
        store=CredentialStore(db),
        encryption=encryption,
        youtube_client_factory=youtube_client_factory,
        validate_on_save=settings.validate_api_key_on_save,
    )


ApiKeyServiceDep = Annotated[ApiKeyService, Depends(get_api_key_service)]
