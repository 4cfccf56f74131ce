"""Transactional email through the Brevo API.

Callers only ever learn that delivery failed: provider status codes and
messages are logged here and never surface in the raised error.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

import httpx

from app.core.logging import logger

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"

DEFAULT_ATTEMPTS = 2
DEFAULT_BASE_DELAY = 0.2  # seconds


class EmailDeliveryError(Exception):
    """Raised when an email could not be handed to the provider."""

    error_code = "internal"

    def __init__(self, message: str = "Failed to send email"):
        super().__init__(message)
        self.message = message


@dataclass
class EmailResult:
    success: bool = True
    message: str = "Email sent successfully"
    message_id: Optional[str] = None


class BrevoEmailClient:
    """Async Brevo transactional email client."""

    def __init__(
        self,
        api_key: str,
        sender_name: str,
        sender_email: str,
        api_url: str = BREVO_API_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        attempts: int = DEFAULT_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
    ):
        """Initialize the email client.

        Args:
            api_key: Brevo API key
            sender_name: Display name of the sender
            sender_email: Sender address
            api_url: Send endpoint
            client: HTTP client to use; one is created when omitted
            timeout: Per-request timeout in seconds
            attempts: Attempts for transport failures
            base_delay: Base delay for exponential backoff
        """
        self.api_key = api_key
        self.sender_name = sender_name
        self.sender_email = sender_email
        self.api_url = api_url
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.attempts = max(1, attempts)
        self.base_delay = base_delay

    async def send_email(self, to: str, subject: str, html_content: str) -> EmailResult:
        """Send one HTML email.

        Args:
            to: Recipient address
            subject: Subject line
            html_content: HTML body

        Returns:
            EmailResult: Successful delivery result

        Raises:
            EmailDeliveryError: If the provider rejected the email or could not be reached
        """
        if not self.api_key:
            logger.error("email_not_configured")
            raise EmailDeliveryError()

        payload = {
            "sender": {"name": self.sender_name, "email": self.sender_email},
            "to": [{"email": to}],
            "subject": subject,
            "htmlContent": html_content,
        }
        headers = {
            "accept": "application/json",
            "api-key": self.api_key,
            "content-type": "application/json",
        }

        response = await self._post(payload, headers)
        if response.is_error:
            logger.error(
                "email_rejected",
                status_code=response.status_code,
                reason=response.reason_phrase,
                subject=subject,
            )
            raise EmailDeliveryError()

        message_id = None
        if response.content:
            try:
                message_id = response.json().get("messageId")
            except ValueError:
                message_id = None

        logger.info("email_sent", subject=subject, message_id=message_id)
        return EmailResult(message_id=message_id)

    async def _post(self, payload: dict, headers: dict) -> httpx.Response:
        for attempt in range(self.attempts):
            try:
                return await self.client.post(self.api_url, json=payload, headers=headers)
            except httpx.RequestError as e:
                logger.warning("email_request_failed", attempt=attempt + 1, error=str(e))
                if attempt == self.attempts - 1:
                    raise EmailDeliveryError() from e
                await asyncio.sleep(self.base_delay * (2**attempt))

    async def aclose(self) -> None:
        await self.client.aclose()
