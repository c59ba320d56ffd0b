"""Translation of domain errors into HTTP responses."""

from fastapi import HTTPException, status

from app.core.errors import (
    ApiKeyNotFoundError,
    CredentialError,
    DecryptionError,
    InvalidInputError,
    StoreUnavailableError,
)
from app.core.youtube.client import (
    InvalidYouTubeApiKeyError,
    YouTubeApiError,
    YouTubeQuotaExceededError,
    YouTubeUnavailableError,
)

STORE_RETRY_AFTER_SECONDS = 5


def http_error(exc: Exception) -> HTTPException:
    """
    Map a credential or upstream error onto an HTTPException.

    Cryptographic details never reach the client; a key that cannot be
    decrypted is reported as needing to be reconnected.
    """
    if isinstance(exc, InvalidInputError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, DecryptionError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DecryptionError.user_message)
    if isinstance(exc, StoreUnavailableError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(exc),
            headers={"Retry-After": str(STORE_RETRY_AFTER_SECONDS)},
        )
    if isinstance(exc, ApiKeyNotFoundError):
        return HTTPException(status_code=status.HTTP_412_PRECONDITION_FAILED, detail=str(exc))
    if isinstance(exc, InvalidYouTubeApiKeyError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid YouTube API key")
    if isinstance(exc, YouTubeQuotaExceededError):
        return HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="YouTube API quota exceeded for this key",
        )
    if isinstance(exc, YouTubeUnavailableError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="YouTube API is unavailable")
    if isinstance(exc, YouTubeApiError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=f"YouTube API error: {exc.message}")
    raise TypeError(f"No HTTP mapping for {exc.__class__.__name__}")


HANDLED_ERRORS = (CredentialError, YouTubeApiError)
