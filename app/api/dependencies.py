"""Dependencies injected into route handlers"""

from fastapi import Depends

from app.config import Settings, settings
from app.services.booking_workflow import BookingWorkflow
from app.services.deferred import DeferredRunner, deferred_runner
from app.services.email_service import EmailService, email_service
from app.services.notifications import NotificationDispatcher
from app.services.packager import DocumentPackager
from app.services.store import BookingStore, InquiryStore, booking_store, inquiry_store


def get_settings() -> Settings:
    return settings


def get_booking_store() -> BookingStore:
    return booking_store


def get_inquiry_store() -> InquiryStore:
    return inquiry_store


def get_email_service() -> EmailService:
    return email_service


def get_deferred_runner() -> DeferredRunner:
    return deferred_runner


def get_dispatcher(
    email: EmailService = Depends(get_email_service),
    app_settings: Settings = Depends(get_settings)
) -> NotificationDispatcher:
    return NotificationDispatcher(email, app_settings)


def get_booking_workflow(
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    app_settings: Settings = Depends(get_settings)
) -> BookingWorkflow:
    return BookingWorkflow(DocumentPackager(), dispatcher, app_settings)
