"""Email delivery through Resend with bounded retries"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional

import resend
import structlog
from pydantic import BaseModel, Field
from resend.exceptions import ResendError

from app.config import settings

logger = structlog.get_logger()

# Resend status codes that will fail the same way on every attempt
PERMANENT_STATUS_CODES = {"400", "401", "403", "404", "405", "422"}


class MailDeliveryError(Exception):
    """Base exception for email delivery failures"""

    def __init__(self, message: str, attempts: int = 1):
        super().__init__(message)
        self.attempts = attempts


class TransientMailError(MailDeliveryError):
    """Timeouts, dropped connections, rate limits and provider outages"""
    pass


class PermanentMailError(MailDeliveryError):
    """Malformed addresses, rejected credentials and missing configuration"""
    pass


class MailAttachment(BaseModel):
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


class MailMessage(BaseModel):
    """Provider-neutral outgoing message"""
    from_address: str
    to: List[str]
    subject: str
    html: str
    attachments: List[MailAttachment] = Field(default_factory=list)
    cc: List[str] = Field(default_factory=list)
    reply_to: Optional[str] = None
    tags: Dict[str, str] = Field(default_factory=dict)


class DeliveryReceipt(BaseModel):
    email_id: str
    attempts: int
    sent_at: datetime


class MailTransport:
    """Hands a single message to a mail provider and returns its message id"""

    async def send(self, message: MailMessage) -> str:
        raise NotImplementedError


class ResendTransport(MailTransport):
    """Transport backed by the Resend API"""

    def __init__(self, api_key: str):
        self.api_key = api_key
        if not api_key:
            logger.warning("resend_api_key_missing")

    def build_params(self, message: MailMessage) -> dict:
        params = {
            "from": message.from_address,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
        }
        if message.attachments:
            params["attachments"] = [
                {
                    "filename": attachment.filename,
                    "content": list(attachment.content),
                    "content_type": attachment.content_type,
                }
                for attachment in message.attachments
            ]
        if message.cc:
            params["cc"] = message.cc
        if message.reply_to:
            params["reply_to"] = message.reply_to
        if message.tags:
            params["tags"] = [{"name": name, "value": value} for name, value in message.tags.items()]
        return params

    async def send(self, message: MailMessage) -> str:
        if not self.api_key:
            raise PermanentMailError("RESEND_API_KEY is not configured")

        resend.api_key = self.api_key
        try:
            # The Resend SDK is blocking
            response = await asyncio.to_thread(resend.Emails.send, self.build_params(message))
        except ResendError as e:
            if str(getattr(e, "code", "")) in PERMANENT_STATUS_CODES:
                raise PermanentMailError(f"Resend error: {e}") from e
            raise TransientMailError(f"Resend error: {e}") from e
        except OSError as e:
            raise TransientMailError(f"Resend unreachable: {e}") from e

        return response.get("id", "")


class EmailService:
    """Sends messages through a transport, retrying transient failures"""

    def __init__(
        self,
        transport: MailTransport,
        max_attempts: int = 3,
        base_delay: float = 1.0
    ):
        self.transport = transport
        self.max_attempts = max_attempts
        self.base_delay = base_delay

    async def send(self, message: MailMessage) -> DeliveryReceipt:
        """
        Deliver a message, retrying transient failures with exponential backoff.

        Args:
            message: The message to deliver

        Returns:
            DeliveryReceipt with the provider's message id

        Raises:
            PermanentMailError: On a failure that retrying cannot fix
            TransientMailError: If every attempt failed transiently
        """
        for attempt in range(self.max_attempts):
            try:
                email_id = await self.transport.send(message)
                logger.info(
                    "email_sent",
                    email_id=email_id,
                    to=message.to,
                    subject=message.subject,
                    attempt=attempt + 1
                )
                return DeliveryReceipt(
                    email_id=email_id,
                    attempts=attempt + 1,
                    sent_at=datetime.now(timezone.utc)
                )

            except PermanentMailError as e:
                e.attempts = attempt + 1
                logger.error("email_send_rejected", to=message.to, error=str(e), attempt=attempt + 1)
                raise

            except TransientMailError as e:
                logger.warning(
                    "email_send_attempt_failed",
                    to=message.to,
                    attempt=attempt + 1,
                    max_attempts=self.max_attempts,
                    error=str(e)
                )
                if attempt == self.max_attempts - 1:
                    raise TransientMailError(
                        f"Email delivery failed after {self.max_attempts} attempts: {e}",
                        attempts=self.max_attempts
                    ) from e

                # Exponential backoff
                await asyncio.sleep(self.base_delay * 2 ** attempt)

        raise MailDeliveryError("Unexpected error in email delivery", attempts=self.max_attempts)


# Global email service instance
email_service = EmailService(
    ResendTransport(settings.resend_api_key),
    max_attempts=settings.email_max_attempts,
    base_delay=settings.email_retry_base_delay
)
