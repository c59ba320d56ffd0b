"""YouTube API key encryption using AES-256-CBC."""

import logging
import os
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from fastapi import Request

from app.core.errors import DecryptionError, InvalidInputError, MasterKeyError

logger = logging.getLogger(__name__)

KEY_SIZE = 32
KEY_HEX_LENGTH = KEY_SIZE * 2
IV_SIZE = 16
TAG_SIZE = 32
BLOCK_SIZE = algorithms.AES.block_size // 8

_MAC_KEY_INFO = b"youtube-api-key-hmac"


@dataclass(frozen=True)
class MasterKey:
    """Process-wide 32-byte AES-256 key.

    Built once at startup and passed explicitly to the cipher functions.
    ``is_ephemeral`` is set when the key was generated randomly because no
    secret was configured; ciphertexts produced under such a key do not
    survive a restart.
    """

    material: bytes = field(repr=False)
    is_ephemeral: bool = False
    mac_key: bytes = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if not isinstance(self.material, bytes) or len(self.material) != KEY_SIZE:
            raise MasterKeyError(f"Master key must be exactly {KEY_SIZE} bytes")
        hkdf = HKDF(algorithm=hashes.SHA256(), length=KEY_SIZE, salt=None, info=_MAC_KEY_INFO)
        object.__setattr__(self, "mac_key", hkdf.derive(self.material))

    @classmethod
    def generate(cls) -> "MasterKey":
        """Create a random key that only lives as long as this process."""
        return cls(os.urandom(KEY_SIZE), is_ephemeral=True)


class EncryptedApiKey(NamedTuple):
    """Hex-encoded ciphertext and the IV it was produced with."""

    ciphertext: str
    iv: str


def derive_master_key(secret_hex: Optional[str] = None) -> MasterKey:
    """
    Build the master key from hex key material.

    Args:
        secret_hex: Hex string; its first 64 characters are decoded into the
                    32-byte key. When absent, a random key is generated.

    Returns:
        MasterKey instance

    Raises:
        MasterKeyError: If the material is too short or not hex
    """
    if secret_hex is None or not secret_hex.strip():
        logger.warning(
            "YOUTUBE_API_ENCRYPTION_KEY is not set; using a random master key. "
            "Stored YouTube API keys will become undecryptable after a restart."
        )
        return MasterKey.generate()

    material = secret_hex.strip()[:KEY_HEX_LENGTH]
    if len(material) < KEY_HEX_LENGTH:
        raise MasterKeyError(
            f"YOUTUBE_API_ENCRYPTION_KEY must contain at least {KEY_HEX_LENGTH} hex characters"
        )
    try:
        raw = bytes.fromhex(material)
    except ValueError as e:
        raise MasterKeyError(f"YOUTUBE_API_ENCRYPTION_KEY is not valid hex: {e}") from e
    if len(raw) != KEY_SIZE:
        raise MasterKeyError(f"YOUTUBE_API_ENCRYPTION_KEY must decode to {KEY_SIZE} bytes")

    return MasterKey(raw)


def load_master_key(settings) -> MasterKey:
    """Derive the master key from application settings at startup."""
    if settings.youtube_api_encryption_key is None and settings.require_encryption_key:
        raise MasterKeyError(
            "YOUTUBE_API_ENCRYPTION_KEY environment variable not set.\n"
            "Generate one with: python -c 'import secrets; print(secrets.token_hex(32))'"
        )
    return derive_master_key(settings.youtube_api_encryption_key)


def _sign(key: MasterKey, iv: bytes, ciphertext: bytes) -> hmac.HMAC:
    mac = hmac.HMAC(key.mac_key, hashes.SHA256())
    mac.update(iv)
    mac.update(ciphertext)
    return mac


def encrypt_api_key(plaintext: str, key: MasterKey) -> EncryptedApiKey:
    """
    Encrypt a plaintext API key.

    A fresh random IV is generated for every call, so encrypting the same
    key twice yields different output.

    Args:
        plaintext: The API key to encrypt
        key: Master key

    Returns:
        EncryptedApiKey with hex ciphertext (CBC output followed by the
        HMAC-SHA256 tag) and hex IV
    """
    if not isinstance(plaintext, str) or not plaintext:
        raise InvalidInputError("Cannot encrypt an empty API key")
    try:
        data = plaintext.encode("utf-8")
    except UnicodeEncodeError as e:
        raise InvalidInputError("API key is not valid UTF-8 text") from e

    iv = os.urandom(IV_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(data) + padder.finalize()

    encryptor = Cipher(algorithms.AES(key.material), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    tag = _sign(key, iv, ciphertext).finalize()

    return EncryptedApiKey(ciphertext=(ciphertext + tag).hex(), iv=iv.hex())


def decrypt_api_key(ciphertext: str, iv: str, key: MasterKey) -> str:
    """
    Decrypt an API key produced by :func:`encrypt_api_key`.

    Args:
        ciphertext: Hex ciphertext as stored
        iv: Hex IV stored alongside the ciphertext
        key: Master key

    Returns:
        Plaintext API key

    Raises:
        DecryptionError: If the input is malformed, the IV does not belong to
                         the ciphertext, or the key is wrong
    """
    try:
        raw = bytes.fromhex(ciphertext)
        iv_bytes = bytes.fromhex(iv)
    except (TypeError, ValueError) as e:
        raise DecryptionError("Encrypted API key is not valid hex") from e

    if len(iv_bytes) != IV_SIZE:
        raise DecryptionError(f"IV must be {IV_SIZE} bytes")
    body_length = len(raw) - TAG_SIZE
    if body_length < BLOCK_SIZE or body_length % BLOCK_SIZE:
        raise DecryptionError("Encrypted API key has an invalid length")

    body, tag = raw[:body_length], raw[body_length:]
    try:
        _sign(key, iv_bytes, body).verify(tag)
    except InvalidSignature:
        raise DecryptionError("Encrypted API key failed authentication") from None

    decryptor = Cipher(algorithms.AES(key.material), modes.CBC(iv_bytes)).decryptor()
    padded = decryptor.update(body) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        data = unpadder.update(padded) + unpadder.finalize()
        return data.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise DecryptionError("Encrypted API key has invalid padding") from e


def mask_api_key(plain_key: str) -> str:
    """Return a masked version of an API key for display (e.g. AIza...7890)."""
    if len(plain_key) <= 8:
        return "••••"
    return f"{plain_key[:4]}...{plain_key[-4:]}"


class KeyEncryptionService:
    """Service for encrypting and decrypting YouTube API keys."""

    def __init__(self, master_key: MasterKey):
        """
        Initialize encryption service with master key.

        Args:
            master_key: Key obtained from :func:`load_master_key` at startup
        """
        self.master_key = master_key

    @property
    def is_ephemeral(self) -> bool:
        return self.master_key.is_ephemeral

    def encrypt(self, plaintext: str) -> EncryptedApiKey:
        """Encrypt a plaintext API key."""
        return encrypt_api_key(plaintext, self.master_key)

    def decrypt(self, ciphertext: str, iv: str) -> str:
        """Decrypt an encrypted API key."""
        return decrypt_api_key(ciphertext, iv, self.master_key)

    @staticmethod
    def generate_master_key() -> str:
        """
        Generate new master key material.

        Returns:
            64 hex characters suitable for YOUTUBE_API_ENCRYPTION_KEY
        """
        return os.urandom(KEY_SIZE).hex()


def get_encryption_service(request: Request) -> KeyEncryptionService:
    """Dependency returning the encryption service created at startup."""
    service: Optional[KeyEncryptionService] = getattr(
        request.app.state, "encryption_service", None
    )
    if service is None:
        raise RuntimeError("Encryption service not initialized")
    return service
