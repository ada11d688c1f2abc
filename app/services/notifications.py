"""Customer and staff notifications for bookings and contact inquiries"""

import asyncio
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

import structlog
from pydantic import BaseModel

from app.config import Settings
from app.models import BookingRecord, ContactInquiry
from app.services import email_templates
from app.services.email_service import (
    EmailService,
    MailAttachment,
    MailDeliveryError,
    MailMessage,
)
from app.services.triage import department_info

logger = structlog.get_logger()


class NotificationKind(str, Enum):
    BOOKING_ADMIN = "booking_admin"
    BOOKING_CUSTOMER = "booking_customer"
    INQUIRY_ACKNOWLEDGEMENT = "inquiry_acknowledgement"
    INQUIRY_INTERNAL = "inquiry_internal"


class NotificationOutcome(BaseModel):
    """Settled result of one notification"""
    kind: NotificationKind
    record_id: str
    recipients: List[str]
    delivered: bool
    email_id: Optional[str] = None
    attempts: int = 0
    error: Optional[str] = None


class NotificationDispatcher:
    """
    Renders and sends notification emails.

    Each notification settles on its own: a failure is reported in its
    NotificationOutcome and never prevents the sibling notification.
    """

    def __init__(self, email_service: EmailService, settings: Settings):
        self.email_service = email_service
        self.settings = settings

    async def _deliver(
        self,
        kind: NotificationKind,
        record_id: str,
        message: MailMessage
    ) -> NotificationOutcome:
        try:
            receipt = await self.email_service.send(message)
        except MailDeliveryError as e:
            logger.error(
                "notification_failed",
                kind=kind.value,
                record_id=record_id,
                attempts=e.attempts,
                error=str(e)
            )
            return NotificationOutcome(
                kind=kind,
                record_id=record_id,
                recipients=message.to,
                delivered=False,
                attempts=e.attempts,
                error=str(e)
            )

        logger.info("notification_sent", kind=kind.value, record_id=record_id, email_id=receipt.email_id)
        return NotificationOutcome(
            kind=kind,
            record_id=record_id,
            recipients=message.to,
            delivered=True,
            email_id=receipt.email_id,
            attempts=receipt.attempts
        )

    # ===== BOOKINGS =====

    async def notify_admin(
        self,
        booking: BookingRecord,
        archive: Optional[bytes] = None
    ) -> NotificationOutcome:
        """Tell staff about a new booking, attaching the documents archive if any"""
        attachments = []
        if archive:
            attachments.append(MailAttachment(
                filename=f"{booking.id_number}_documents.zip",
                content=archive,
                content_type="application/zip"
            ))

        message = MailMessage(
            from_address=self.settings.booking_from_address,
            to=[self.settings.admin_email],
            subject=f"📋 NEW BOOKING: {booking.car_type} - {booking.customer_name} ({booking.id_number})",
            html=email_templates.admin_booking_html(booking, has_archive=bool(archive)),
            attachments=attachments,
            tags={"category": "booking_admin"}
        )
        return await self._deliver(NotificationKind.BOOKING_ADMIN, booking.id, message)

    async def notify_customer(
        self,
        booking: BookingRecord,
        document: bytes,
        archive: Optional[bytes] = None
    ) -> NotificationOutcome:
        """Send the customer their confirmation PDF and, if any, their documents"""
        attachments = [MailAttachment(
            filename=f"booking-confirmation-{booking.id}.pdf",
            content=document,
            content_type="application/pdf"
        )]
        if archive:
            attachments.append(MailAttachment(
                filename=f"{booking.id_number}_your_documents.zip",
                content=archive,
                content_type="application/zip"
            ))

        year = datetime.now(timezone.utc).year
        message = MailMessage(
            from_address=self.settings.booking_from_address,
            to=[booking.email],
            subject=f"✅ Booking Confirmed: {booking.id} - {self.settings.company_name}",
            html=email_templates.booking_confirmation_html(booking, self.settings, year),
            attachments=attachments,
            tags={"category": "booking_confirmation"}
        )
        return await self._deliver(NotificationKind.BOOKING_CUSTOMER, booking.id, message)

    async def dispatch_booking(
        self,
        booking: BookingRecord,
        document: Optional[bytes],
        archive: Optional[bytes] = None
    ) -> List[NotificationOutcome]:
        """Notify staff and customer concurrently and collect both outcomes"""
        admin_task = self.notify_admin(booking, archive)
        if document is None:
            # No confirmation to send; staff still hear about the booking
            admin_outcome = await admin_task
            customer_outcome = NotificationOutcome(
                kind=NotificationKind.BOOKING_CUSTOMER,
                record_id=booking.id,
                recipients=[booking.email],
                delivered=False,
                error="Confirmation document unavailable"
            )
            return [admin_outcome, customer_outcome]

        return list(await asyncio.gather(
            admin_task,
            self.notify_customer(booking, document, archive)
        ))

    # ===== CONTACT INQUIRIES =====

    async def acknowledge_inquiry(self, inquiry: ContactInquiry) -> NotificationOutcome:
        department = department_info(inquiry.department, self.settings)
        year = datetime.now(timezone.utc).year
        message = MailMessage(
            from_address=self.settings.contact_from_address,
            to=[inquiry.email],
            subject=f"We've received your inquiry: {inquiry.subject}",
            html=email_templates.inquiry_acknowledgement_html(inquiry, department, self.settings, year),
            reply_to=department.email,
            tags={
                "category": "contact_acknowledgement",
                "department": inquiry.department.value,
                "priority": inquiry.priority.value,
            }
        )
        return await self._deliver(NotificationKind.INQUIRY_ACKNOWLEDGEMENT, inquiry.id, message)

    async def notify_inquiry_staff(self, inquiry: ContactInquiry) -> NotificationOutcome:
        department = department_info(inquiry.department, self.settings)
        message = MailMessage(
            from_address=self.settings.system_from_address,
            to=[department.email],
            cc=[self.settings.admin_email],
            subject=f"🚨 New {inquiry.priority.value.upper()} Inquiry: {inquiry.subject}",
            html=email_templates.inquiry_internal_html(inquiry, department, datetime.now(timezone.utc)),
            tags={
                "category": "internal_notification",
                "department": inquiry.department.value,
                "priority": inquiry.priority.value,
                "inquiry_id": inquiry.id,
            }
        )
        return await self._deliver(NotificationKind.INQUIRY_INTERNAL, inquiry.id, message)

    async def dispatch_inquiry(self, inquiry: ContactInquiry) -> List[NotificationOutcome]:
        """Acknowledge the customer and alert the department concurrently"""
        return list(await asyncio.gather(
            self.acknowledge_inquiry(inquiry),
            self.notify_inquiry_staff(inquiry)
        ))
