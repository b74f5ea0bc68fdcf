"""Encryption at rest for provider tokens.

Google and Facebook access and refresh tokens are stored so that the account
can call the provider on the user's behalf later. They are encrypted with
Fernet (AES-128-CBC + HMAC-SHA256) keyed by PGCRYPTO_KEY before they reach
the database.
"""

from typing import Optional

import structlog
from cryptography.fernet import Fernet, InvalidToken

from src.core.config.settings import settings
from src.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


class ProviderTokenCipher:
    """Encrypts and decrypts provider tokens with the configured Fernet key."""

    def __init__(self, encryption_key: Optional[str] = None):
        """Initialize the cipher.

        Args:
            encryption_key: Optional Fernet key for testing. If None, uses PGCRYPTO_KEY.

        Raises:
            ConfigurationError: If the key is missing or malformed in staging
                or production.
        """
        key = encryption_key or settings.PGCRYPTO_KEY.get_secret_value()
        try:
            self._fernet = Fernet(key.encode())
        except (ValueError, TypeError) as e:
            if settings.APP_ENV in ("staging", "production"):
                raise ConfigurationError("PGCRYPTO_KEY is not a valid Fernet key") from e
            # Tokens encrypted with a generated key are unreadable after restart.
            logger.warning(
                "Invalid PGCRYPTO_KEY provided, falling back to generated key",
                environment=settings.APP_ENV,
            )
            self._fernet = Fernet(Fernet.generate_key())

    def encrypt(self, value: Optional[str]) -> Optional[bytes]:
        if value is None:
            return None
        return self._fernet.encrypt(value.encode("utf-8"))

    def decrypt(self, value: Optional[bytes]) -> Optional[str]:
        """Decrypts a stored provider token.

        The orchestrator only writes provider tokens. This is the read side for
        operational use: calling a provider API on the user's behalf, or
        re-encrypting stored tokens when PGCRYPTO_KEY is rotated.

        Raises:
            InvalidToken: If the value was not produced with the current key.
        """
        if value is None:
            return None
        try:
            return self._fernet.decrypt(value).decode("utf-8")
        except InvalidToken:
            logger.error("Provider token decryption failed", error_type="invalid_token")
            raise
