"""Intake of the optional identity, licence and deposit uploads"""

import re
import time
from pathlib import Path
from typing import Dict, List, NamedTuple

import structlog

from app.models import BookingDocuments
from app.services.validation import FieldError

logger = structlog.get_logger()

# Form part name -> BookingDocuments attribute
DOCUMENT_FIELDS = {
    "idDocument": "id_document_path",
    "drivingLicense": "driving_license_path",
    "depositProof": "deposit_proof_path",
}

ALLOWED_EXTENSIONS = {".jpeg", ".jpg", ".png", ".pdf"}
ALLOWED_TYPES = re.compile(r"jpeg|jpg|png|pdf")
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class UploadedDocument(NamedTuple):
    field: str
    filename: str
    content_type: str
    content: bytes


class UploadRejected(Exception):
    """Raised when an upload cannot be written to the upload directory"""
    pass


def check_uploads(uploads: Dict[str, UploadedDocument], max_bytes: int) -> List[FieldError]:
    """Type and size checks for every uploaded document"""
    errors = []
    for field, upload in uploads.items():
        extension = Path(upload.filename).suffix.lower()
        if extension not in ALLOWED_EXTENSIONS or not ALLOWED_TYPES.search(upload.content_type or ""):
            errors.append(FieldError(
                field=field,
                message="Only .jpeg, .jpg, .png, and .pdf files are allowed"
            ))
        if len(upload.content) > max_bytes:
            errors.append(FieldError(
                field=field,
                message=f"File exceeds the {max_bytes // (1024 * 1024)}MB size limit"
            ))
    return errors


def stored_filename(id_number: str, original_name: str, now_ms: int) -> str:
    """{idNumber}_{original stem}_{timestamp}{ext}, stripped of path parts"""
    original = Path(original_name).name
    stem = _UNSAFE_CHARS.sub("_", Path(original).stem) or "document"
    extension = Path(original).suffix.lower()
    safe_id = _UNSAFE_CHARS.sub("_", id_number) or "unknown"
    return f"{safe_id}_{stem}_{now_ms}{extension}"


def save_uploads(
    uploads: Dict[str, UploadedDocument],
    id_number: str,
    upload_dir: Path
) -> BookingDocuments:
    """Write uploads to disk and return the resulting document paths"""
    paths = {}
    now_ms = int(time.time() * 1000)
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        # Offset keeps names distinct when two parts share an original name
        for offset, (field, upload) in enumerate(uploads.items()):
            target = upload_dir / stored_filename(id_number, upload.filename, now_ms + offset)
            target.write_bytes(upload.content)
            paths[DOCUMENT_FIELDS[field]] = str(target)
    except OSError as e:
        logger.error("upload_save_failed", error=str(e), upload_dir=str(upload_dir))
        raise UploadRejected(str(e)) from e

    logger.info(
        "documents_uploaded",
        id_number=id_number,
        **{field: field in uploads for field in DOCUMENT_FIELDS}
    )
    return BookingDocuments(**paths)
