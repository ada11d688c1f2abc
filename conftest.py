"""Shared fixtures: isolated settings, fresh stores and a recording mail transport"""

from typing import List

import pytest
from fastapi.testclient import TestClient

from app.api import dependencies
from app.config import Settings
from app.main import app
from app.models import BookingDocuments
from app.services.deferred import DeferredRunner
from app.services.email_service import EmailService, MailMessage, MailTransport
from app.services.notifications import NotificationDispatcher
from app.services.store import BookingStore, InquiryStore
from app.services.validation import validate_booking, validate_inquiry


class RecordingTransport(MailTransport):
    """Keeps every message instead of sending it; raises queued failures first"""

    def __init__(self, failures=None):
        self.sent: List[MailMessage] = []
        self.failures = list(failures or [])
        self.calls = 0

    async def send(self, message: MailMessage) -> str:
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        self.sent.append(message)
        return f"email-{len(self.sent)}"


JANE_DOE = {
    "customerName": "  Jane Doe ",
    "email": "Jane@Example.com",
    "phone": "+254700000000",
    "pickupDate": "2025-07-01",
    "returnDate": "2025-07-05",
    "carType": "Toyota Prado",
    "pickupLocation": "Nairobi",
    "idNumber": "12345678",
    "idType": "id",
    "termsAccepted": True,
}


@pytest.fixture
def booking_form():
    return dict(JANE_DOE)


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        resend_api_key="re_test",
        upload_dir=tmp_path / "uploads",
        archive_cleanup_delay_seconds=0,
        email_retry_base_delay=0,
        admin_email="admin@example.com",
        department_general_email="general@example.com",
        department_support_email="support@example.com",
    )


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def email(transport):
    return EmailService(transport, max_attempts=3, base_delay=0)


@pytest.fixture
def dispatcher(email, test_settings):
    return NotificationDispatcher(email, test_settings)


@pytest.fixture
def booking_store():
    return BookingStore()


@pytest.fixture
def inquiry_store():
    return InquiryStore()


@pytest.fixture
def runner():
    return DeferredRunner()


@pytest.fixture
def make_booking(booking_store):
    def _make(documents: BookingDocuments = None, **overrides):
        result = validate_booking({**JANE_DOE, **overrides})
        assert result.is_valid, result.errors
        return booking_store.create(result.value, documents)
    return _make


@pytest.fixture
def make_inquiry(inquiry_store):
    def _make(**overrides):
        form = {
            "name": "John Smith",
            "email": "john@example.com",
            "subject": "Question about rates",
            "message": "What are your weekly rates?",
            "department": "general",
            **overrides,
        }
        result = validate_inquiry(form)
        assert result.is_valid, result.errors
        return inquiry_store.create(result.value)
    return _make


@pytest.fixture
def client(test_settings, email, booking_store, inquiry_store, runner):
    app.dependency_overrides[dependencies.get_settings] = lambda: test_settings
    app.dependency_overrides[dependencies.get_email_service] = lambda: email
    app.dependency_overrides[dependencies.get_booking_store] = lambda: booking_store
    app.dependency_overrides[dependencies.get_inquiry_store] = lambda: inquiry_store
    app.dependency_overrides[dependencies.get_deferred_runner] = lambda: runner

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
