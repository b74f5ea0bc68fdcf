"""Verification code delivery by SMS through an HTTP gateway."""

from typing import Optional

import httpx
import structlog

from src.core.config.settings import settings
from src.core.exceptions import ConfigurationError, NotificationDeliveryError
from src.domain.interfaces.services import ISmsNotificationAdapter

logger = structlog.get_logger(__name__)


def _mask_phone(to: str) -> str:
    return f"{'*' * max(len(to) - 2, 0)}{to[-2:]}"


class HttpSmsService(ISmsNotificationAdapter):
    """Posts verification codes to an SMS gateway as JSON.

    The gateway receives `{"to": "+<digits>", "from": <sender>, "body": <text>}`
    with the API key as a bearer token. In test mode, messages are logged
    instead of sent.
    """

    def __init__(
        self,
        gateway_url: Optional[str] = None,
        api_key: Optional[str] = None,
        sender_id: Optional[str] = None,
        timeout: Optional[float] = None,
        test_mode: Optional[bool] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.gateway_url = gateway_url or settings.SMS_GATEWAY_URL
        self.api_key = api_key or settings.SMS_GATEWAY_API_KEY.get_secret_value()
        self.sender_id = sender_id or settings.SMS_SENDER_ID
        self.timeout = timeout or settings.SMS_TIMEOUT_SECONDS
        self.test_mode = settings.SMS_TEST_MODE if test_mode is None else test_mode
        self._transport = transport

        logger.info("HttpSmsService initialized", test_mode=self.test_mode)

    async def send_verification_code_sms(self, to: str, code: str) -> None:
        body = f"Your {settings.PROJECT_NAME} verification code is {code}"

        if self.test_mode:
            logger.info("Verification SMS sent in test mode", to=_mask_phone(to), body_length=len(body))
            return

        if not self.gateway_url:
            raise ConfigurationError("SMS_GATEWAY_URL is not configured")

        payload = {"to": f"+{to}", "from": self.sender_id, "body": body}
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.gateway_url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "Failed to send verification SMS",
                to=_mask_phone(to),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NotificationDeliveryError("Failed to send verification SMS") from e

        logger.info("Verification SMS sent", to=_mask_phone(to), status_code=response.status_code)
