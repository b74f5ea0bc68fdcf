"""Main application settings and configuration management.

This module composes all the application settings from the different modules
(app, database, auth, notification) into a single, accessible `Settings` class.

It loads settings from environment variables and .env files, validates them,
and provides a single `settings` object for use throughout the application.

Environment Support:
- Development: Uses .env, email/SMS test mode enabled
- Test: Uses .env.test, email/SMS test mode enabled
- Staging: Uses .env.staging, SMTP credentials required
- Production: Uses .env.production, SMTP credentials required
"""

import logging
import os
from pathlib import Path

from pydantic_settings import SettingsConfigDict

from .app import AppSettings
from .auth import AuthSettings
from .database import DatabaseSettings
from .notification import NotificationSettings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class Settings(AppSettings, DatabaseSettings, AuthSettings, NotificationSettings):
    """The main settings class that aggregates all application configurations.

    It inherits from all the specialized settings classes, providing a unified
    interface to all configuration parameters.

    Security Note:
        - Ensure all sensitive fields (JWT keys, client secrets, PGCRYPTO_KEY) are
          securely stored and never logged or exposed.
    Usage:
        - Access settings via the singleton instance `settings` throughout the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="allow"
    )

    def __init__(self, **kwargs):
        """Initialize settings with environment-specific configuration."""
        super().__init__(**kwargs)
        self._set_environment_defaults(self.APP_ENV)

    def _set_environment_defaults(self, env: str) -> None:
        """Set environment-specific default values.

        Args:
            env: Environment name
        """
        if env in ("development", "test"):
            self.EMAIL_TEST_MODE = True
            self.SMS_TEST_MODE = True
            logger.info(f"Notification test mode enabled for {env} environment")

        if env == "development":
            self.DEBUG = True

        logger.info(f"Application running in {env} environment")

    def validate_required_fields(self) -> None:
        """Validates that the fields needed outside development are set.

        Raises:
            ValueError: If required fields are missing in staging or production.
        """
        if self.APP_ENV not in ("staging", "production"):
            return

        required_fields = ["DATABASE_URL", "PGCRYPTO_KEY", "JWT_PRIVATE_KEY", "JWT_PUBLIC_KEY"]
        missing_fields = []
        for field in required_fields:
            value = getattr(self, field, None)
            if hasattr(value, "get_secret_value"):
                value = value.get_secret_value()
            if not value:
                missing_fields.append(field)

        if missing_fields:
            error_msg = f"Missing required environment variables: {', '.join(missing_fields)}"
            logger.error(error_msg)
            raise ValueError(error_msg)

        self.validate_smtp_config()
        logger.info("All required environment variables are set.")


def create_settings() -> Settings:
    """Create settings instance with environment-specific configuration.

    Returns:
        Settings: Configured settings instance
    """
    env = os.getenv("APP_ENV", "development")

    env_files = {
        "development": ".env",
        "test": ".env.test",
        "staging": ".env.staging",
        "production": ".env.production",
    }
    env_file = env_files.get(env, ".env")

    if env != "development" and Path(env_file).exists():
        logger.info(f"Loading environment configuration from {env_file}")
        return Settings(_env_file=env_file)
    if Path(".env").exists():
        logger.info(f"Loading environment configuration from .env (environment: {env})")
    else:
        logger.warning(f"No .env file found, using environment variables only (environment: {env})")
    return Settings()


# Create a singleton instance of the settings to be used across the application.
settings = create_settings()
settings.validate_required_fields()
