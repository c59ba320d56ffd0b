"""Error taxonomy for stored YouTube API key handling."""

from typing import Optional


class CredentialError(Exception):
    """Base class for API key storage and encryption errors."""

    retryable = False


class InvalidInputError(CredentialError, ValueError):
    """An empty or malformed API key was submitted."""


class MasterKeyError(ValueError):
    """Master key material is missing or malformed."""


class DecryptionError(CredentialError):
    """A stored credential cannot be decrypted.

    Raised when the ciphertext/IV pair is malformed, was produced under a
    different master key, or fails authentication. The credential is unusable
    and the user has to submit their key again; callers must not retry.
    """

    user_message = "Please reconnect your API key"


class StoreUnavailableError(CredentialError):
    """The credential store could not be reached."""

    retryable = True

    def __init__(self, message: str = "Credential storage is temporarily unavailable"):
        super().__init__(message)


class ApiKeyNotFoundError(CredentialError):
    """No active API key is configured for the user."""

    def __init__(self, user_id: str, inactive: bool = False, message: Optional[str] = None):
        self.user_id = user_id
        self.inactive = inactive
        super().__init__(message or "YouTube API key is not configured")
