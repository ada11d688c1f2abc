"""Tests for the deferred booking workflow and runner"""

import asyncio
import io
import zipfile
from unittest.mock import patch

import pytest

from app.models import BookingDocuments
from app.services.booking_workflow import BookingWorkflow
from app.services.deferred import DeferredRunner
from app.services.packager import ArchivePackagingError, DocumentPackager


@pytest.fixture
def workflow(dispatcher, test_settings):
    return BookingWorkflow(DocumentPackager(), dispatcher, test_settings)


@pytest.mark.asyncio
async def test_process_attaches_archive_and_removes_it(workflow, transport, make_booking, test_settings):
    upload_dir = test_settings.upload_dir
    upload_dir.mkdir(parents=True)
    (upload_dir / "id.png").write_bytes(b"png")
    booking = make_booking(BookingDocuments(id_document_path=str(upload_dir / "id.png")))

    outcomes = await workflow.process(booking)
    await asyncio.sleep(0.01)

    assert all(o.delivered for o in outcomes)
    admin_message = next(m for m in transport.sent if m.to == ["admin@example.com"])
    assert admin_message.attachments[0].filename == "12345678_documents.zip"
    assert not (upload_dir / "archives" / booking.id).exists()


@pytest.mark.asyncio
async def test_concurrent_bookings_sharing_id_number_get_their_own_archives(
    workflow, transport, make_booking, test_settings
):
    upload_dir = test_settings.upload_dir
    upload_dir.mkdir(parents=True)
    bookings = []
    for index in range(6):
        document = upload_dir / f"doc{index}.pdf"
        document.write_bytes(bytes([index]) * 512 * 1024)
        bookings.append(make_booking(BookingDocuments(id_document_path=str(document))))

    results = await asyncio.gather(*(workflow.process(booking) for booking in bookings))
    await asyncio.sleep(0.01)

    assert all(o.delivered for outcomes in results for o in outcomes)
    admin_messages = [m for m in transport.sent if m.to == ["admin@example.com"]]
    assert len(admin_messages) == 6
    for index, booking in enumerate(bookings):
        (message,) = [m for m in admin_messages if booking.id in m.html]
        (attachment,) = message.attachments
        with zipfile.ZipFile(io.BytesIO(attachment.content)) as bundle:
            assert bundle.namelist() == [f"doc{index}.pdf"]
            assert bundle.read(f"doc{index}.pdf") == bytes([index]) * 512 * 1024
    assert list((upload_dir / "archives").iterdir()) == []


@pytest.mark.asyncio
async def test_packaging_failure_still_notifies(workflow, transport, make_booking, test_settings):
    with patch.object(DocumentPackager, "package_to_path", side_effect=ArchivePackagingError("disk full")):
        outcomes = await workflow.process(make_booking())

    assert all(o.delivered for o in outcomes)
    assert len(transport.sent) == 2


@pytest.mark.asyncio
async def test_render_failure_only_affects_customer(workflow, transport, make_booking):
    with patch("app.services.booking_workflow.render_booking_confirmation", side_effect=RuntimeError("font")):
        admin, customer = await workflow.process(make_booking())

    assert admin.delivered
    assert not customer.delivered


@pytest.mark.asyncio
async def test_resend_confirmation_builds_archive_in_memory(workflow, transport, make_booking, test_settings):
    upload_dir = test_settings.upload_dir
    upload_dir.mkdir(parents=True)
    (upload_dir / "licence.pdf").write_bytes(b"%PDF-licence")
    booking = make_booking(BookingDocuments(driving_license_path=str(upload_dir / "licence.pdf")))

    outcome = await workflow.resend_confirmation(booking)

    assert outcome.delivered
    names = [a.filename for a in transport.sent[0].attachments]
    assert names == [f"booking-confirmation-{booking.id}.pdf", "12345678_your_documents.zip"]
    assert not any(path.suffix == ".zip" for path in upload_dir.iterdir())


@pytest.mark.asyncio
async def test_runner_records_failures():
    runner = DeferredRunner(max_dead_letters=2)

    async def explode(value):
        raise ValueError(f"bad {value}")

    async def succeed():
        return None

    await runner.run("ok", succeed)
    for value in range(3):
        await runner.run(f"task-{value}", explode, value)

    assert [letter.name for letter in runner.dead_letters] == ["task-1", "task-2"]
    assert runner.dead_letters[-1].error == "bad 2"
