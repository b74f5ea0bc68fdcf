"""Tests for provider token encryption at rest."""

import pytest
from cryptography.fernet import Fernet, InvalidToken

from src.infrastructure.services.authentication.token_encryption import ProviderTokenCipher


class TestProviderTokenCipher:
    def test_encrypted_value_is_not_the_plain_token(self, token_cipher):
        encrypted = token_cipher.encrypt("ya29.provider-access-token")

        assert isinstance(encrypted, bytes)
        assert b"provider-access-token" not in encrypted
        assert token_cipher.decrypt(encrypted) == "ya29.provider-access-token"

    def test_none_passes_through(self, token_cipher):
        assert token_cipher.encrypt(None) is None
        assert token_cipher.decrypt(None) is None

    def test_other_key_cannot_decrypt(self, token_cipher):
        other = ProviderTokenCipher(encryption_key=Fernet.generate_key().decode())
        encrypted = other.encrypt("token")

        with pytest.raises(InvalidToken):
            token_cipher.decrypt(encrypted)

    def test_invalid_key_falls_back_outside_production(self):
        cipher = ProviderTokenCipher(encryption_key="not-a-fernet-key")

        assert cipher.decrypt(cipher.encrypt("token")) == "token"
