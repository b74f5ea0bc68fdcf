"""Notification settings for verification code delivery by email and SMS.

Email is delivered over SMTP through fastapi-mail; SMS is delivered through an
HTTP gateway. Both channels support a test mode in which messages are logged
instead of sent.
"""

from typing import Optional

from pydantic import EmailStr, Field, SecretStr
from pydantic_settings import BaseSettings


class NotificationSettings(BaseSettings):
    """Email and SMS delivery settings with secure defaults.

    Security considerations:
    - SMTP and SMS gateway credentials are handled as SecretStr to prevent logging
    - TLS is enforced by default for SMTP
    - Verification codes are never written to logs outside test mode
    """

    # SMTP Configuration
    EMAIL_SMTP_HOST: str = Field(default="localhost", description="SMTP server hostname")
    EMAIL_SMTP_PORT: int = Field(
        default=587, ge=1, le=65535, description="SMTP server port (587 for TLS, 465 for SSL)"
    )
    EMAIL_SMTP_USERNAME: Optional[str] = Field(default=None)
    EMAIL_SMTP_PASSWORD: Optional[SecretStr] = Field(default=None)
    EMAIL_SMTP_USE_TLS: bool = Field(default=True)
    EMAIL_SMTP_USE_SSL: bool = Field(default=False)
    EMAIL_FROM_EMAIL: EmailStr = Field(default="noreply@example.com")
    EMAIL_FROM_NAME: str = Field(default="Identity")
    EMAIL_VERIFICATION_SUBJECT: str = Field(default="Your verification code")
    EMAIL_TEST_MODE: bool = Field(
        default=False, description="Enable test mode (emails logged instead of sent)"
    )

    # SMS gateway
    SMS_GATEWAY_URL: str = Field(default="", description="HTTP endpoint accepting outbound SMS")
    SMS_GATEWAY_API_KEY: SecretStr = SecretStr("")
    SMS_SENDER_ID: str = Field(default="Identity")
    SMS_TIMEOUT_SECONDS: float = Field(gt=0, default=10.0)
    SMS_TEST_MODE: bool = Field(
        default=False, description="Enable test mode (SMS logged instead of sent)"
    )

    def validate_smtp_config(self) -> None:
        """Validate SMTP configuration for production use.

        Raises:
            ValueError: If SMTP configuration is invalid or insecure
        """
        if self.EMAIL_TEST_MODE or getattr(self, "APP_ENV", "development") not in {"production", "staging"}:
            return

        if not self.EMAIL_SMTP_USERNAME or not self.EMAIL_SMTP_PASSWORD:
            raise ValueError("EMAIL_SMTP_USERNAME and EMAIL_SMTP_PASSWORD are required in production")

        if not (self.EMAIL_SMTP_USE_TLS or self.EMAIL_SMTP_USE_SSL):
            raise ValueError("Either EMAIL_SMTP_USE_TLS or EMAIL_SMTP_USE_SSL must be enabled for security")

        if self.EMAIL_SMTP_USE_TLS and self.EMAIL_SMTP_USE_SSL:
            raise ValueError("Cannot enable both EMAIL_SMTP_USE_TLS and EMAIL_SMTP_USE_SSL simultaneously")
