"""Deferred phase of a booking: package, render, notify, clean up"""

import asyncio
from pathlib import Path
from typing import List, Optional

import structlog

from app.config import Settings
from app.models import BookingRecord
from app.services.notifications import NotificationDispatcher, NotificationOutcome
from app.services.packager import ArchivePackagingError, DocumentPackager
from app.services.pdf_renderer import render_booking_confirmation

logger = structlog.get_logger()


def remove_archive(path: Path) -> None:
    """Delete a booking archive and its per-booking directory"""
    try:
        path.unlink(missing_ok=True)
        path.parent.rmdir()
        logger.info("archive_cleaned_up", path=str(path))
    except OSError as e:
        logger.warning("archive_cleanup_failed", path=str(path), error=str(e))


class BookingWorkflow:
    """Runs after the booking response: documents first, then both notifications"""

    def __init__(
        self,
        packager: DocumentPackager,
        dispatcher: NotificationDispatcher,
        settings: Settings
    ):
        self.packager = packager
        self.dispatcher = dispatcher
        self.settings = settings

    async def render(self, booking: BookingRecord) -> Optional[bytes]:
        try:
            return await asyncio.to_thread(
                render_booking_confirmation, booking, None, self.settings
            )
        except Exception as e:
            logger.error("confirmation_pdf_failed", booking_id=booking.id, error=str(e), exc_info=True)
            return None

    def archive_dir(self, booking: BookingRecord) -> Path:
        """Archive directory owned by this booking alone"""
        return Path(self.settings.upload_dir) / "archives" / booking.id

    def schedule_cleanup(self, path: Path) -> None:
        """Delete the archive after a grace delay so in-flight sends can finish"""
        loop = asyncio.get_running_loop()
        loop.call_later(self.settings.archive_cleanup_delay_seconds, remove_archive, path)

    async def process(self, booking: BookingRecord) -> List[NotificationOutcome]:
        """Package documents, render the confirmation and notify staff and customer"""
        archive_path = None
        archive = None
        try:
            archive_path = await asyncio.to_thread(
                self.packager.package_to_path, booking, self.archive_dir(booking)
            )
            if archive_path:
                archive = await asyncio.to_thread(archive_path.read_bytes)
        except (ArchivePackagingError, OSError) as e:
            logger.warning("continuing_without_archive", booking_id=booking.id, error=str(e))

        try:
            document = await self.render(booking)
            outcomes = await self.dispatcher.dispatch_booking(booking, document, archive)
        finally:
            if archive_path:
                self.schedule_cleanup(archive_path)

        delivered = sum(1 for outcome in outcomes if outcome.delivered)
        logger.info(
            "booking_notifications_settled",
            booking_id=booking.id,
            delivered=delivered,
            failed=len(outcomes) - delivered
        )
        return outcomes

    async def resend_confirmation(self, booking: BookingRecord) -> NotificationOutcome:
        """Rebuild the confirmation and documents in memory and email the customer again"""
        try:
            archive = await asyncio.to_thread(self.packager.package_to_bytes, booking)
        except ArchivePackagingError as e:
            logger.warning("continuing_without_archive", booking_id=booking.id, error=str(e))
            archive = None

        document = await asyncio.to_thread(
            render_booking_confirmation, booking, None, self.settings
        )
        return await self.dispatcher.notify_customer(booking, document, archive)
