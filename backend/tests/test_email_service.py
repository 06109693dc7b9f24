"""Tests for the SendGrid email sender."""

from unittest.mock import MagicMock, patch

import pytest

from eventhub.config import Settings
from eventhub.services.email_service import EmailDeliveryError, EmailService

RESET_URL = "http://localhost:3000/reset-password?token=abc"


@pytest.fixture
def email_service():
    return EmailService(Settings(sendgrid_api_key="SG.test-key"))


def test_send_skipped_without_api_key():
    service = EmailService(Settings(sendgrid_api_key=""))

    with patch("eventhub.services.email_service.SendGridAPIClient") as client_cls:
        service.send("ada@example.com", RESET_URL)

    client_cls.assert_not_called()


def test_send_delivers_reset_link(email_service):
    with patch("eventhub.services.email_service.SendGridAPIClient") as client_cls:
        client_cls.return_value.send.return_value = MagicMock(status_code=202)
        email_service.send("ada@example.com", RESET_URL)

    client_cls.assert_called_once_with("SG.test-key")
    message = client_cls.return_value.send.call_args[0][0]
    body = str(message.get())
    assert RESET_URL in body
    assert "ada@example.com" in body


def test_send_raises_on_error_status(email_service):
    with patch("eventhub.services.email_service.SendGridAPIClient") as client_cls:
        client_cls.return_value.send.return_value = MagicMock(status_code=500)

        with pytest.raises(EmailDeliveryError):
            email_service.send("ada@example.com", RESET_URL)


def test_send_raises_on_client_exception(email_service):
    with patch("eventhub.services.email_service.SendGridAPIClient") as client_cls:
        client_cls.return_value.send.side_effect = Exception("connection refused")

        with pytest.raises(EmailDeliveryError) as exc_info:
            email_service.send("ada@example.com", RESET_URL)

    assert isinstance(exc_info.value.__cause__, Exception)
