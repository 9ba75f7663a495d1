"""
API key encryption at rest.

Tenant API keys are stored in system_settings as base64 of
salt(16) + iv(12) + tag(16) + ciphertext, sealed with AES-256-GCM under a key
derived from the process secret with PBKDF2-SHA256.

Dependencies: cryptography
System role: Decrypts stored provider credentials
"""

import base64
import os
from functools import lru_cache

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from crm_rag.core.exceptions import ApiKeyDecryptionError

SALT_LENGTH = 16
IV_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32
ITERATIONS = 100_000


@lru_cache(maxsize=32)
def _derive_key(secret: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=ITERATIONS,
    )
    return kdf.derive(secret.encode("utf-8"))


def encrypt_api_key(plaintext: str, secret: str) -> str:
    """
    Encrypt an API key for storage.

    Args:
        plaintext: API key
        secret: Process encryption secret

    Returns:
        str: base64 of salt + iv + tag + ciphertext
    """
    salt = os.urandom(SALT_LENGTH)
    iv = os.urandom(IV_LENGTH)
    sealed = AESGCM(_derive_key(secret, salt)).encrypt(iv, plaintext.encode("utf-8"), None)
    # AESGCM appends the tag; stored layout puts it before the ciphertext
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return base64.b64encode(salt + iv + tag + ciphertext).decode("ascii")


def decrypt_api_key(stored: str, secret: str | None) -> str:
    """
    Decrypt a stored API key.

    Args:
        stored: base64 value read from system_settings
        secret: Process encryption secret

    Returns:
        str: Plaintext API key

    Raises:
        ApiKeyDecryptionError: If no secret is set or the value does not
            decrypt under it
    """
    if not secret:
        raise ApiKeyDecryptionError("AI_ENCRYPTION_KEY is not set")

    try:
        combined = base64.b64decode(stored)
    except ValueError as e:
        raise ApiKeyDecryptionError("Stored API key is not valid base64") from e

    header = SALT_LENGTH + IV_LENGTH + TAG_LENGTH
    if len(combined) < header:
        raise ApiKeyDecryptionError("Stored API key is truncated")

    salt = combined[:SALT_LENGTH]
    iv = combined[SALT_LENGTH:SALT_LENGTH + IV_LENGTH]
    tag = combined[SALT_LENGTH + IV_LENGTH:header]
    ciphertext = combined[header:]

    try:
        plaintext = AESGCM(_derive_key(secret, salt)).decrypt(iv, ciphertext + tag, None)
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError) as e:
        raise ApiKeyDecryptionError("Stored API key failed authentication") from e


def mask_api_key(key: str) -> str:
    """Mask an API key for logs, e.g. sk-****...abcd."""
    if len(key) <= 8:
        return "****"
    return f"{key[:3]}****...{key[-4:]}"
