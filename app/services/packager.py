"""Zip packaging of a booking's uploaded documents"""

import io
import zipfile
from pathlib import Path
from typing import List, Optional

import structlog

from app.models import BookingRecord

logger = structlog.get_logger()


class ArchivePackagingError(Exception):
    """Raised when the archive itself cannot be written"""
    pass


def archive_name(booking: BookingRecord) -> str:
    return f"{booking.id_number}_documents.zip"


class DocumentPackager:
    """Bundles whichever of a booking's documents still exist on disk"""

    def existing_documents(self, booking: BookingRecord) -> List[Path]:
        candidates = [
            booking.id_document_path,
            booking.driving_license_path,
            booking.deposit_proof_path,
        ]
        return [Path(path) for path in candidates if path and Path(path).is_file()]

    def _write(self, target, files: List[Path]) -> None:
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in files:
                archive.write(path, arcname=path.name)

    def package_to_bytes(self, booking: BookingRecord) -> Optional[bytes]:
        """Build the archive in memory; None when there is nothing to package"""
        files = self.existing_documents(booking)
        if not files:
            logger.info("no_documents_to_package", booking_id=booking.id)
            return None

        buffer = io.BytesIO()
        try:
            self._write(buffer, files)
        except (OSError, zipfile.BadZipFile) as e:
            logger.error("archive_creation_failed", booking_id=booking.id, error=str(e))
            raise ArchivePackagingError(str(e)) from e

        logger.info("archive_created", booking_id=booking.id, file_count=len(files))
        return buffer.getvalue()

    def package_to_path(self, booking: BookingRecord, directory: Path) -> Optional[Path]:
        """Write {idNumber}_documents.zip into directory; None when there is nothing to package"""
        files = self.existing_documents(booking)
        if not files:
            logger.info("no_documents_to_package", booking_id=booking.id)
            return None

        target = Path(directory) / archive_name(booking)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write(target, files)
        except (OSError, zipfile.BadZipFile) as e:
            logger.error("archive_creation_failed", booking_id=booking.id, error=str(e))
            raise ArchivePackagingError(str(e)) from e

        logger.info("archive_created", booking_id=booking.id, path=str(target), file_count=len(files))
        return target
