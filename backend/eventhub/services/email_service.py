"""Email delivery using SendGrid."""

import logging
from typing import Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from eventhub.config import Settings

logger = logging.getLogger(__name__)


class MessageSender(Protocol):
    """Delivers a password reset link to an address. May raise on failure."""

    def send(self, to_address: str, reset_url: str) -> None: ...


class EmailDeliveryError(Exception):
    """SendGrid rejected or failed to accept a message."""


class EmailService:
    """Sends transactional emails via SendGrid."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def _send_email(self, to_email: str, subject: str, html_content: str, text_content: str) -> bool:
        """Send email via SendGrid.

        Returns False when no API key is configured.

        Raises:
            EmailDeliveryError: If SendGrid fails or answers with a non-2xx status.
        """
        if not self._settings.sendgrid_api_key:
            logger.warning("SendGrid API key not configured, skipping email send")
            return False

        message = Mail(
            from_email=(self._settings.email_from_address, self._settings.email_from_name),
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
            plain_text_content=text_content,
        )

        try:
            sg = SendGridAPIClient(self._settings.sendgrid_api_key)
            response = sg.send(message)
        except Exception as e:
            raise EmailDeliveryError(f"Failed to send email to {to_email}") from e

        if response.status_code not in (200, 201, 202):
            raise EmailDeliveryError(
                f"SendGrid answered {response.status_code} for email to {to_email}"
            )
        logger.info(f"Email sent to {to_email}, status: {response.status_code}")
        return True

    def send(self, to_address: str, reset_url: str) -> None:
        """Send a password reset link."""
        expires = self._settings.password_reset_token_expire_minutes
        html = f"""
        <h2>Reset Your Password</h2>
        <p>You requested to reset your password.</p>
        <p>Click the link below to set a new password. This link expires in {expires} minutes.</p>
        <p><a href="{reset_url}">{reset_url}</a></p>
        <p>If you didn't request this, you can ignore this email.</p>
        """
        text = f"Reset your password using the link below (valid for {expires} minutes):\n{reset_url}"
        self._send_email(to_address, "Reset Your Password - EventHub", html, text)
