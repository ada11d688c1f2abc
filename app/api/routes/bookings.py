"""Booking endpoints"""

from datetime import date, datetime
from typing import Any, Dict, Optional, Tuple

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from starlette.datastructures import UploadFile

from app.api.dependencies import (
    get_booking_store,
    get_booking_workflow,
    get_deferred_runner,
    get_settings,
)
from app.api.errors import validation_failed
from app.config import Settings
from app.models import ApiModel, BookingRecord, BookingStatus, IdType
from app.services.booking_workflow import BookingWorkflow
from app.services.deferred import DeferredRunner
from app.services.store import BookingStore
from app.services.uploads import (
    DOCUMENT_FIELDS,
    UploadedDocument,
    UploadRejected,
    check_uploads,
    save_uploads,
)
from app.services.validation import FieldError, validate_booking

logger = structlog.get_logger()
router = APIRouter()


class DocumentFlags(ApiModel):
    id_document: bool
    driving_license: bool
    deposit_proof: bool


class BookingSummary(ApiModel):
    """Booking as returned to the web client"""
    id: str
    customer_name: str
    email: str
    phone: str
    pickup_date: date
    return_date: date
    car_type: str
    pickup_location: str
    dropoff_location: Optional[str] = None
    id_number: str
    id_type: IdType
    status: BookingStatus
    booking_date: datetime
    has_documents: DocumentFlags

    @classmethod
    def from_record(cls, booking: BookingRecord) -> "BookingSummary":
        return cls(
            **booking.model_dump(include=set(cls.model_fields) - {"has_documents"}),
            has_documents=DocumentFlags(
                id_document=bool(booking.id_document_path),
                driving_license=bool(booking.driving_license_path),
                deposit_proof=bool(booking.deposit_proof_path),
            )
        )


class BookingCreatedResponse(ApiModel):
    success: bool = True
    message: str
    booking: BookingSummary


class ConfirmationRequest(ApiModel):
    booking_id: Optional[str] = None


class ConfirmationResponse(ApiModel):
    success: bool = True
    message: str
    email_id: Optional[str] = None


async def read_submission(request: Request, max_bytes: int) -> Tuple[Dict[str, Any], Dict[str, UploadedDocument]]:
    """
    Split a multipart or JSON booking body into form fields and document uploads.

    Upload reads stop one byte past max_bytes, enough for the size check to reject them.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        fields, uploads = {}, {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key in DOCUMENT_FIELDS and value.filename:
                    uploads[key] = UploadedDocument(
                        field=key,
                        filename=value.filename,
                        content_type=value.content_type or "",
                        content=await value.read(max_bytes + 1)
                    )
            else:
                fields[key] = value
        return fields, uploads

    payload = await request.json()
    if not isinstance(payload, dict):
        raise ValueError("Booking body must be a JSON object")
    return payload, {}


@router.post("/bookings", status_code=201, response_model=BookingCreatedResponse)
async def create_booking(
    request: Request,
    background_tasks: BackgroundTasks,
    store: BookingStore = Depends(get_booking_store),
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    runner: DeferredRunner = Depends(get_deferred_runner),
    settings: Settings = Depends(get_settings),
):
    """
    Public booking form submission.

    Responds as soon as the booking is stored; document packaging, the
    confirmation PDF and both emails run afterwards.
    """
    try:
        fields, uploads = await read_submission(request, settings.max_upload_bytes)
    except ValueError as e:
        logger.warning("booking_payload_unreadable", error=str(e))
        return validation_failed([FieldError(field="body", message="Request body could not be parsed")])

    result = validate_booking(fields)
    errors = result.errors + check_uploads(uploads, settings.max_upload_bytes)
    if errors:
        logger.info("booking_rejected", fields=[error.field for error in errors])
        return validation_failed(errors)

    submission = result.value
    try:
        documents = save_uploads(uploads, submission.id_number, settings.upload_dir)
    except UploadRejected:
        raise HTTPException(status_code=500, detail="Failed to store uploaded documents")

    booking = store.create(submission, documents)

    background_tasks.add_task(runner.run, f"booking_notifications:{booking.id}", workflow.process, booking)

    return BookingCreatedResponse(
        message="Booking created successfully",
        booking=BookingSummary.from_record(booking)
    )


@router.post("/bookings/send-confirmation", response_model=ConfirmationResponse)
async def send_booking_confirmation(
    request: ConfirmationRequest,
    store: BookingStore = Depends(get_booking_store),
    workflow: BookingWorkflow = Depends(get_booking_workflow),
):
    """Email the confirmation PDF and documents to the customer again"""
    if not request.booking_id:
        raise HTTPException(status_code=400, detail="bookingId is required")

    booking = store.get(request.booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")

    outcome = await workflow.resend_confirmation(booking)
    if not outcome.delivered:
        logger.error("resend_confirmation_failed", booking_id=booking.id, error=outcome.error)
        raise HTTPException(status_code=500, detail="Failed to resend confirmation email")

    return ConfirmationResponse(
        message="Confirmation email sent successfully",
        email_id=outcome.email_id
    )
