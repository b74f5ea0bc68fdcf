"""
Database connection settings.
"""
import logging

from pydantic import Field, SecretStr, ValidationInfo, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class DatabaseSettings(BaseSettings):
    """
    Defines settings for connecting to the account database.

    Security Note:
        - POSTGRES_PASSWORD and PGCRYPTO_KEY must be securely stored and never
          logged or exposed in version control
          (OWASP A02:2021 - Cryptographic Failures).
        - PGCRYPTO_KEY is a Fernet key used to encrypt provider tokens at rest.
          Rotating it makes previously stored provider tokens unreadable.
    Performance Note:
        - Tune POSTGRES_POOL_SIZE and POSTGRES_MAX_OVERFLOW based on application
          load and database server capacity to optimize connection handling.
    """
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("postgres")
    POSTGRES_DB: str = "identity"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = Field(ge=1, le=65535, default=5432)
    POSTGRES_POOL_SIZE: int = Field(ge=1, default=10)
    POSTGRES_MAX_OVERFLOW: int = Field(ge=0, default=20)
    POSTGRES_POOL_TIMEOUT: float = Field(ge=1.0, default=5.0)
    DATABASE_URL: str = Field(default="", validate_default=True)
    PGCRYPTO_KEY: SecretStr = SecretStr("")

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_url(cls, v: str | None, info: ValidationInfo) -> str:
        """
        Assembles the async database connection URL if not provided explicitly.

        Args:
            v: Explicitly provided URL or None.
            info: Validation context with other field values.

        Returns:
            Assembled or provided database URL.
        """
        if v:
            return v

        values = info.data
        password = values.get("POSTGRES_PASSWORD")
        if not password:
            logger.warning("POSTGRES_PASSWORD not set during DATABASE_URL assembly.")
            password_value = ""
        else:
            password_value = password.get_secret_value()

        url = (
            f"postgresql+asyncpg://{values.get('POSTGRES_USER')}:"
            f"{password_value}@{values.get('POSTGRES_HOST')}:"
            f"{values.get('POSTGRES_PORT')}/{values.get('POSTGRES_DB')}"
        )
        logger.debug("Assembled DATABASE_URL (password masked for security).")
        return url
