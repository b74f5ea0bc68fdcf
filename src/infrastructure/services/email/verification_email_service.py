"""Verification code delivery by email.

Messages are rendered from Jinja2 templates and sent over SMTP with
fastapi-mail. In test mode, emails are logged instead of sent.
"""

from pathlib import Path
from typing import Optional

import structlog
from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType
from jinja2 import Environment, FileSystemLoader, select_autoescape

from src.core.config.settings import settings
from src.core.exceptions import NotificationDeliveryError
from src.domain.interfaces.services import IEmailNotificationAdapter
from src.domain.value_objects.email import Email

logger = structlog.get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


class VerificationEmailService(IEmailNotificationAdapter):
    """Sends magic link codes by email.

    Attributes:
        fastmail: FastMail client, `None` in test mode.
        test_mode: When True, messages are logged instead of sent.
    """

    def __init__(self, fastmail: Optional[FastMail] = None, test_mode: Optional[bool] = None):
        self.test_mode = settings.EMAIL_TEST_MODE if test_mode is None else test_mode
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.fastmail = fastmail
        if self.fastmail is None and not self.test_mode:
            self.fastmail = FastMail(self._connection_config())

        logger.info(
            "VerificationEmailService initialized",
            test_mode=self.test_mode,
            smtp_configured=bool(settings.EMAIL_SMTP_USERNAME),
        )

    @staticmethod
    def _connection_config() -> ConnectionConfig:
        return ConnectionConfig(
            MAIL_USERNAME=settings.EMAIL_SMTP_USERNAME or "",
            MAIL_PASSWORD=settings.EMAIL_SMTP_PASSWORD.get_secret_value() if settings.EMAIL_SMTP_PASSWORD else "",
            MAIL_FROM=settings.EMAIL_FROM_EMAIL,
            MAIL_FROM_NAME=settings.EMAIL_FROM_NAME,
            MAIL_PORT=settings.EMAIL_SMTP_PORT,
            MAIL_SERVER=settings.EMAIL_SMTP_HOST,
            MAIL_STARTTLS=settings.EMAIL_SMTP_USE_TLS,
            MAIL_SSL_TLS=settings.EMAIL_SMTP_USE_SSL,
            USE_CREDENTIALS=bool(settings.EMAIL_SMTP_USERNAME and settings.EMAIL_SMTP_PASSWORD),
            VALIDATE_CERTS=True,
        )

    async def send_verification_code_email(self, to: str, code: str) -> None:
        """Send a verification code email.

        Args:
            to: Recipient email address
            code: Magic link code

        Raises:
            NotificationDeliveryError: If the email could not be sent
        """
        recipient = Email(to)
        subject = settings.EMAIL_VERIFICATION_SUBJECT
        context = {
            "subject": subject,
            "code": code,
            "app_name": settings.PROJECT_NAME,
            "expires_in_minutes": settings.MAGIC_LINK_CODE_EXPIRE_MINUTES,
        }
        html_body = self.jinja_env.get_template("verification_code.html").render(**context)
        text_body = self.jinja_env.get_template("verification_code.txt").render(**context)

        if self.test_mode:
            logger.info(
                "Verification email sent in test mode",
                to_email=recipient.mask_for_logging(),
                subject=subject,
                html_length=len(html_body),
            )
            return

        message = MessageSchema(
            subject=subject,
            recipients=[recipient.value],
            body=html_body,
            alternative_body=text_body,
            subtype=MessageType.html,
            multipart_subtype="alternative",
        )
        try:
            await self.fastmail.send_message(message)
        except Exception as e:
            logger.error(
                "Failed to send verification email",
                to_email=recipient.mask_for_logging(),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NotificationDeliveryError("Failed to send verification email") from e

        logger.info("Verification email sent", to_email=recipient.mask_for_logging())
