"""
Test suite for stored API key encryption.

System role: Verification of API key decryption at rest
"""

import base64

import pytest

from crm_rag.boundary.embeddings.encryption import (
    SALT_LENGTH,
    decrypt_api_key,
    encrypt_api_key,
    mask_api_key,
)
from crm_rag.core.exceptions import ApiKeyDecryptionError

SECRET = "unit-test-secret"


class TestDecryptApiKey:
    """Test suite for decrypt_api_key()."""

    def test_should_recover_encrypted_key(self) -> None:
        stored = encrypt_api_key("sk-live-1234567890", SECRET)

        assert stored != "sk-live-1234567890"
        assert decrypt_api_key(stored, SECRET) == "sk-live-1234567890"

    def test_each_encryption_should_use_fresh_salt(self) -> None:
        first = base64.b64decode(encrypt_api_key("sk-same", SECRET))
        second = base64.b64decode(encrypt_api_key("sk-same", SECRET))

        assert first[:SALT_LENGTH] != second[:SALT_LENGTH]

    def test_wrong_secret_should_fail(self) -> None:
        stored = encrypt_api_key("sk-live", SECRET)

        with pytest.raises(ApiKeyDecryptionError):
            decrypt_api_key(stored, "another-secret")

    def test_missing_secret_should_fail(self) -> None:
        stored = encrypt_api_key("sk-live", SECRET)

        with pytest.raises(ApiKeyDecryptionError):
            decrypt_api_key(stored, None)

    def test_tampered_ciphertext_should_fail(self) -> None:
        raw = bytearray(base64.b64decode(encrypt_api_key("sk-live", SECRET)))
        raw[-1] ^= 0x01

        with pytest.raises(ApiKeyDecryptionError):
            decrypt_api_key(base64.b64encode(bytes(raw)).decode("ascii"), SECRET)

    @pytest.mark.parametrize("stored", ["sk-plaintext-key", "", "c2hvcnQ="])
    def test_plaintext_or_truncated_value_should_fail(self, stored: str) -> None:
        """Test values that were never encrypted are rejected."""
        with pytest.raises(ApiKeyDecryptionError):
            decrypt_api_key(stored, SECRET)


class TestMaskApiKey:
    """Test suite for mask_api_key()."""

    def test_should_keep_prefix_and_suffix(self) -> None:
        assert mask_api_key("sk-abcdefghijkl") == "sk-****...ijkl"

    def test_short_key_should_be_fully_masked(self) -> None:
        assert mask_api_key("sk-1234") == "****"
