"""Tests for email delivery, retries and templates"""

from unittest.mock import patch

import pytest
from resend.exceptions import ResendError

from app.services.email_service import (
    EmailService,
    MailAttachment,
    MailMessage,
    PermanentMailError,
    ResendTransport,
    TransientMailError,
)
from app.services.email_templates import (
    PENDING_BADGE,
    UPLOADED_BADGE,
    admin_booking_html,
    booking_confirmation_html,
    status_badge,
)
from conftest import RecordingTransport


def make_message(**overrides):
    fields = {
        "from_address": "Bookings <bookings@example.com>",
        "to": ["jane@example.com"],
        "subject": "Booking Confirmed",
        "html": "<p>Hello</p>",
    }
    fields.update(overrides)
    return MailMessage(**fields)


def resend_error(code):
    return ResendError(
        code=code,
        error_type="error",
        message=f"status {code}",
        suggested_action="",
    )


@pytest.mark.asyncio
async def test_send_returns_receipt():
    transport = RecordingTransport()
    service = EmailService(transport, base_delay=0)

    receipt = await service.send(make_message())

    assert receipt.email_id == "email-1"
    assert receipt.attempts == 1
    assert transport.sent[0].to == ["jane@example.com"]


@pytest.mark.asyncio
async def test_transient_failures_are_retried_with_backoff():
    transport = RecordingTransport(failures=[TransientMailError("timeout"), TransientMailError("timeout")])
    service = EmailService(transport, max_attempts=3, base_delay=0.5)

    with patch("app.services.email_service.asyncio.sleep") as sleep:
        receipt = await service.send(make_message())

    assert receipt.attempts == 3
    assert [call.args[0] for call in sleep.call_args_list] == [0.5, 1.0]


@pytest.mark.asyncio
async def test_gives_up_after_max_attempts():
    transport = RecordingTransport(failures=[TransientMailError("down")] * 3)
    service = EmailService(transport, max_attempts=3, base_delay=0)

    with pytest.raises(TransientMailError) as excinfo:
        await service.send(make_message())

    assert excinfo.value.attempts == 3
    assert transport.calls == 3
    assert transport.sent == []


@pytest.mark.asyncio
async def test_permanent_failure_is_not_retried():
    transport = RecordingTransport(failures=[PermanentMailError("invalid address")])
    service = EmailService(transport, max_attempts=3, base_delay=0)

    with pytest.raises(PermanentMailError) as excinfo:
        await service.send(make_message())

    assert excinfo.value.attempts == 1
    assert transport.calls == 1


@pytest.mark.asyncio
async def test_resend_transport_without_api_key():
    with pytest.raises(PermanentMailError):
        await ResendTransport("").send(make_message())


@pytest.mark.asyncio
@pytest.mark.parametrize("code, expected", [
    (422, PermanentMailError),
    (401, PermanentMailError),
    (429, TransientMailError),
    (500, TransientMailError),
])
async def test_resend_errors_are_classified(code, expected):
    transport = ResendTransport("re_test")

    with patch("app.services.email_service.resend.Emails.send", side_effect=resend_error(code)):
        with pytest.raises(expected):
            await transport.send(make_message())


@pytest.mark.asyncio
async def test_resend_transport_returns_message_id():
    transport = ResendTransport("re_test")

    with patch("app.services.email_service.resend.Emails.send", return_value={"id": "abc-123"}) as send:
        email_id = await transport.send(make_message())

    assert email_id == "abc-123"
    assert send.call_args.args[0]["to"] == ["jane@example.com"]


def test_build_params_maps_optional_fields():
    message = make_message(
        attachments=[MailAttachment(filename="a.zip", content=b"PK", content_type="application/zip")],
        cc=["admin@example.com"],
        reply_to="support@example.com",
        tags={"category": "booking_admin"},
    )

    params = ResendTransport("re_test").build_params(message)

    assert params["attachments"] == [
        {"filename": "a.zip", "content": [80, 75], "content_type": "application/zip"}
    ]
    assert params["cc"] == ["admin@example.com"]
    assert params["reply_to"] == "support@example.com"
    assert params["tags"] == [{"name": "category", "value": "booking_admin"}]


def test_build_params_omits_empty_fields():
    params = ResendTransport("re_test").build_params(make_message())

    assert set(params) == {"from", "to", "subject", "html"}


def test_status_badge():
    assert status_badge("/uploads/id.png") == UPLOADED_BADGE
    assert status_badge(None) == PENDING_BADGE


def test_templates_escape_customer_input(make_booking, test_settings):
    booking = make_booking(customerName="<script>alert(1)</script>")

    customer_html = booking_confirmation_html(booking, test_settings, 2025)
    admin_html = admin_booking_html(booking, has_archive=False)

    for html in (customer_html, admin_html):
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
    assert admin_html.count(PENDING_BADGE) == 3
