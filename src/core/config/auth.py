"""Authentication settings: access-token signing, magic link codes and OAuth providers.
"""

import logging
from pathlib import Path
from typing import List

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class AuthSettings(BaseSettings):
    """Defines settings for credential issuance and external sign-in providers.
    It handles loading JWT keys from PEM files or environment variables.

    Security Note:
        - JWT keys must be securely stored and rotated regularly to prevent token forgery
          (OWASP A02:2021 - Cryptographic Failures).
        - OAuth client secrets should never be exposed in logs or version control.
        - Ensure PEM files are readable only by the application user (chmod 600) to prevent
          unauthorized access to private keys.
    """

    # OAuth settings
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: SecretStr = SecretStr("")
    GOOGLE_REQUIRED_SCOPES: List[str] = [
        "openid",
        "https://www.googleapis.com/auth/userinfo.email",
    ]
    FACEBOOK_CLIENT_ID: str = ""
    FACEBOOK_CLIENT_SECRET: SecretStr = SecretStr("")
    FACEBOOK_REQUIRED_SCOPES: List[str] = ["email", "public_profile"]
    FACEBOOK_GRAPH_VERSION: str = "v18.0"
    OAUTH_HTTP_TIMEOUT_SECONDS: float = Field(gt=0, default=10.0)

    # JWT settings
    JWT_PRIVATE_KEY: SecretStr = SecretStr("")
    JWT_PUBLIC_KEY: str = ""
    JWT_ALGORITHM: str = Field(default="RS256", pattern="^(RS256|RS384|RS512|ES256)$")
    JWT_ISSUER: str = "https://identity.example.com"
    JWT_AUDIENCE: str = "identity:api"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(ge=1, default=15)

    # Magic link codes
    MAGIC_LINK_CODE_EXPIRE_MINUTES: int = Field(ge=1, le=1440, default=15)
    MAGIC_LINK_CODE_LENGTH: int = Field(ge=4, le=12, default=6)

    @model_validator(mode="after")
    def _load_jwt_keys(self) -> "AuthSettings":
        """Loads JWT keys, prioritizing .pem files over environment variables.

        Missing keys are only reported here; the token adapter refuses to mint
        without a private key.

        Returns:
            Self instance with loaded keys.
        """
        self._load_keys_from_pem_files()

        if not self.JWT_PRIVATE_KEY.get_secret_value() or not self.JWT_PUBLIC_KEY:
            logger.warning(
                "JWT keys not configured. Provide JWT_PRIVATE_KEY and JWT_PUBLIC_KEY "
                "either via .env variables or through private.pem/public.pem files."
            )
        return self

    def _load_keys_from_pem_files(self) -> None:
        """Loads JWT keys from private.pem and public.pem in the working directory."""
        private_key_path = Path("private.pem").resolve()
        public_key_path = Path("public.pem").resolve()

        if private_key_path.is_file():
            try:
                private_key = private_key_path.read_text().strip()
                if private_key:
                    self.JWT_PRIVATE_KEY = SecretStr(private_key)
                    logger.info(
                        "Loaded JWT private key from private.pem, overriding env var if set."
                    )
            except OSError as e:
                logger.error(f"Failed to read private.pem: {e!s}")

        if public_key_path.is_file():
            try:
                public_key = public_key_path.read_text().strip()
                if public_key:
                    self.JWT_PUBLIC_KEY = public_key
                    logger.info("Loaded JWT public key from public.pem, overriding env var if set.")
            except OSError as e:
                logger.error(f"Failed to read public.pem: {e!s}")
