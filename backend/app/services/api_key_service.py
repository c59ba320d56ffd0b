"""Lifecycle of per-user YouTube API keys: save, check, delete and server-side use."""

import logging
import re
from typing import Callable, Optional

from app.core.errors import ApiKeyNotFoundError, DecryptionError, InvalidInputError
from app.core.security.encryption import KeyEncryptionService, mask_api_key
from app.core.storage.credential_store import CredentialStatus, CredentialStore
from app.core.youtube.client import YouTubeClient
from app.models.schemas.settings import ApiKeyStatusResponse

logger = logging.getLogger(__name__)

MAX_API_KEY_LENGTH = 256
_API_KEY_PATTERN = re.compile(r"^[\x21-\x7e]+$")

YouTubeClientFactory = Callable[[str], YouTubeClient]


def normalize_api_key(api_key: Optional[str]) -> str:
    """
    Validate the shape of a submitted API key.

    Raises:
        InvalidInputError: If the key is empty, too long, or contains
                           whitespace or non-printable characters
    """
    if api_key is None or not api_key.strip():
        raise InvalidInputError("API key cannot be empty")
    api_key = api_key.strip()
    if len(api_key) > MAX_API_KEY_LENGTH:
        raise InvalidInputError(f"API key must be at most {MAX_API_KEY_LENGTH} characters")
    if not _API_KEY_PATTERN.match(api_key):
        raise InvalidInputError("API key contains invalid characters")
    return api_key


class ApiKeyService:
    """
    Caller-facing operations on a user's YouTube API key.

    Decrypted keys returned by :meth:`get_decrypted_api_key` are for
    server-side upstream calls only and must never be sent to a client.
    """

    def __init__(
        self,
        store: CredentialStore,
        encryption: KeyEncryptionService,
        youtube_client_factory: Optional[YouTubeClientFactory] = None,
        validate_on_save: bool = True,
    ):
        self.store = store
        self.encryption = encryption
        self.youtube_client_factory = youtube_client_factory
        self.validate_on_save = validate_on_save

    async def save_api_key(self, user_id: str, api_key: str) -> ApiKeyStatusResponse:
        """
        Validate, encrypt and store a user's API key, replacing any previous one.

        Raises:
            InvalidInputError: If the key is malformed
            InvalidYouTubeApiKeyError: If YouTube rejects the key
            StoreUnavailableError: If the store cannot be reached
        """
        api_key = normalize_api_key(api_key)

        validated = False
        if self.validate_on_save and self.youtube_client_factory is not None:
            async with self.youtube_client_factory(api_key) as client:
                await client.validate()
            validated = True

        encrypted = self.encryption.encrypt(api_key)
        await self.store.upsert(user_id, encrypted.ciphertext, encrypted.iv)
        if validated:
            await self.store.touch_validated(user_id)

        logger.info("Saved YouTube API key %s for user %s", mask_api_key(api_key), user_id)
        return await self.get_status(user_id)

    async def has_api_key(self, user_id: str) -> bool:
        return await self.store.get(user_id) is not None

    async def get_status(self, user_id: str) -> ApiKeyStatusResponse:
        credential = await self.store.get(user_id)
        if credential is None:
            return ApiKeyStatusResponse(has_key=False)
        return ApiKeyStatusResponse(
            has_key=True,
            last_validated=credential.last_validated,
            updated_at=credential.updated_at,
        )

    async def delete_api_key(self, user_id: str, hard: bool = False) -> None:
        """Deactivate (or with ``hard`` physically delete) the key. Idempotent."""
        if hard:
            await self.store.delete(user_id)
        else:
            await self.store.deactivate(user_id)
        logger.info("Removed YouTube API key for user %s (hard=%s)", user_id, hard)

    async def get_decrypted_api_key(self, user_id: str) -> Optional[str]:
        """
        Decrypt the user's active key for an upstream call.

        Returns:
            Plaintext key, or None when no active key is stored

        Raises:
            DecryptionError: If the stored key is unusable
        """
        credential = await self.store.get(user_id)
        if credential is None:
            logger.debug("No active YouTube API key for user %s", user_id)
            return None

        try:
            return self.encryption.decrypt(credential.encrypted_api_key, credential.iv)
        except DecryptionError:
            logger.warning(
                "Stored YouTube API key for user %s cannot be decrypted%s",
                user_id,
                " (master key is ephemeral)" if self.encryption.is_ephemeral else "",
            )
            raise

    async def require_decrypted_api_key(self, user_id: str) -> str:
        """Like :meth:`get_decrypted_api_key` but raises when no key is stored."""
        api_key = await self.get_decrypted_api_key(user_id)
        if api_key is None:
            status = await self.store.status(user_id)
            raise ApiKeyNotFoundError(user_id, inactive=status == CredentialStatus.INACTIVE)
        return api_key

    async def open_youtube_client(self, user_id: str) -> YouTubeClient:
        """Create an upstream client authenticated with the user's stored key."""
        if self.youtube_client_factory is None:
            raise RuntimeError("YouTube client factory not configured")
        api_key = await self.require_decrypted_api_key(user_id)
        return self.youtube_client_factory(api_key)
