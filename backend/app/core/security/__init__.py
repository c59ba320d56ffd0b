"""Security module."""

from app.core.security.encryption import (
    EncryptedApiKey,
    KeyEncryptionService,
    MasterKey,
    decrypt_api_key,
    derive_master_key,
    encrypt_api_key,
    get_encryption_service,
    load_master_key,
    mask_api_key,
)

__all__ = [
    "EncryptedApiKey",
    "KeyEncryptionService",
    "MasterKey",
    "decrypt_api_key",
    "derive_master_key",
    "encrypt_api_key",
    "get_encryption_service",
    "load_master_key",
    "mask_api_key",
]
