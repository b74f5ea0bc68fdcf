"""Tests for verification code delivery by email."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.exceptions import NotificationDeliveryError
from src.infrastructure.services.email.verification_email_service import VerificationEmailService


@pytest.fixture
def mock_fastmail():
    mock = MagicMock()
    mock.send_message = AsyncMock()
    return mock


class TestVerificationEmailService:
    @pytest.mark.asyncio
    async def test_sends_rendered_message(self, mock_fastmail):
        service = VerificationEmailService(fastmail=mock_fastmail, test_mode=False)

        await service.send_verification_code_email("Person@Example.com", "482913")

        message = mock_fastmail.send_message.await_args.args[0]
        assert [r.email for r in message.recipients] == ["person@example.com"]
        assert "482913" in message.body
        assert "482913" in message.alternative_body

    @pytest.mark.asyncio
    async def test_template_escapes_html(self, mock_fastmail):
        service = VerificationEmailService(fastmail=mock_fastmail, test_mode=False)

        await service.send_verification_code_email("person@example.com", "<b>1</b>")

        message = mock_fastmail.send_message.await_args.args[0]
        assert "<b>1</b>" not in message.body
        assert "&lt;b&gt;1&lt;/b&gt;" in message.body

    @pytest.mark.asyncio
    async def test_smtp_failure_is_a_delivery_error(self, mock_fastmail):
        mock_fastmail.send_message.side_effect = ConnectionRefusedError("smtp down")
        service = VerificationEmailService(fastmail=mock_fastmail, test_mode=False)

        with pytest.raises(NotificationDeliveryError):
            await service.send_verification_code_email("person@example.com", "482913")

    @pytest.mark.asyncio
    async def test_test_mode_logs_instead_of_sending(self, mock_fastmail):
        service = VerificationEmailService(fastmail=mock_fastmail, test_mode=True)

        await service.send_verification_code_email("person@example.com", "482913")

        mock_fastmail.send_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_recipient_is_rejected(self, mock_fastmail):
        service = VerificationEmailService(fastmail=mock_fastmail, test_mode=False)

        with pytest.raises(ValueError):
            await service.send_verification_code_email("not-an-email", "482913")
