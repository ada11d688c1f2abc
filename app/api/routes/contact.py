"""Contact inquiry endpoints"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request

from app.api.dependencies import get_deferred_runner, get_dispatcher, get_inquiry_store
from app.api.errors import validation_failed
from app.models import (
    ApiModel,
    ContactInquiry,
    Department,
    InquiryStatus,
    Priority,
)
from app.services.deferred import DeferredRunner
from app.services.notifications import NotificationDispatcher, NotificationKind
from app.services.store import InquiryStore
from app.services.triage import estimated_response_time
from app.services.validation import FieldError, validate_inquiry

logger = structlog.get_logger()
router = APIRouter()


class InquirySummary(ApiModel):
    id: str
    name: str
    email: str
    subject: str
    department: Department
    priority: Priority
    status: InquiryStatus
    assigned_to: str
    submission_date: datetime
    estimated_response_time: str

    @classmethod
    def from_inquiry(cls, inquiry: ContactInquiry) -> "InquirySummary":
        return cls(
            **inquiry.model_dump(include=set(cls.model_fields) - {"estimated_response_time"}),
            estimated_response_time=estimated_response_time(inquiry.priority)
        )


class InquiryCreatedResponse(ApiModel):
    success: bool = True
    message: str
    inquiry: InquirySummary


class InquiryListResponse(ApiModel):
    success: bool = True
    count: int
    inquiries: List[ContactInquiry]


class InquiryResponse(ApiModel):
    success: bool = True
    inquiry: ContactInquiry


class InquiryStats(ApiModel):
    total: int
    by_status: Dict[str, int]
    by_priority: Dict[str, int]
    by_department: Dict[str, int]
    recent_inquiries: List[ContactInquiry]


class InquiryStatsResponse(ApiModel):
    success: bool = True
    stats: InquiryStats


class StatusUpdate(ApiModel):
    status: Optional[str] = None
    assigned_to: Optional[str] = None


class StatusUpdateResponse(ApiModel):
    success: bool = True
    message: str
    inquiry: ContactInquiry
    updated_at: datetime


class ResendResponse(ApiModel):
    success: bool
    message: str
    results: Dict[str, str]


@router.post("/contact", status_code=201, response_model=InquiryCreatedResponse)
async def submit_inquiry(
    request: Request,
    background_tasks: BackgroundTasks,
    store: InquiryStore = Depends(get_inquiry_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    runner: DeferredRunner = Depends(get_deferred_runner),
):
    """
    Public contact form submission.

    The inquiry is stored and answered straight away; the acknowledgement
    and the department alert are sent afterwards.
    """
    try:
        payload = await request.json()
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        return validation_failed([FieldError(field="body", message="Request body must be a JSON object")])

    result = validate_inquiry(payload)
    if not result.is_valid:
        logger.info("inquiry_rejected", fields=[error.field for error in result.errors])
        return validation_failed(result.errors)

    inquiry = store.create(result.value)

    background_tasks.add_task(runner.run, f"inquiry_notifications:{inquiry.id}", dispatcher.dispatch_inquiry, inquiry)

    return InquiryCreatedResponse(
        message="Thank you for your inquiry. We will be in touch shortly.",
        inquiry=InquirySummary.from_inquiry(inquiry)
    )


@router.get("/contact/inquiries", response_model=InquiryListResponse)
async def list_inquiries(
    department: Optional[str] = None,
    status: Optional[str] = None,
    priority: Optional[str] = None,
    limit: Optional[int] = None,
    store: InquiryStore = Depends(get_inquiry_store),
):
    """List inquiries, most urgent first and newest first within a priority"""
    inquiries = store.list_inquiries(
        department=department,
        status=status,
        priority=priority,
        limit=limit
    )
    return InquiryListResponse(count=len(inquiries), inquiries=inquiries)


@router.get("/contact/stats", response_model=InquiryStatsResponse)
async def inquiry_stats(store: InquiryStore = Depends(get_inquiry_store)):
    return InquiryStatsResponse(stats=InquiryStats(**store.stats()))


@router.get("/contact/inquiries/{inquiry_id}", response_model=InquiryResponse)
async def get_inquiry(inquiry_id: str, store: InquiryStore = Depends(get_inquiry_store)):
    inquiry = store.get(inquiry_id)
    if not inquiry:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return InquiryResponse(inquiry=inquiry)


@router.patch("/contact/inquiries/{inquiry_id}/status", response_model=StatusUpdateResponse)
async def update_inquiry_status(
    inquiry_id: str,
    update: StatusUpdate,
    store: InquiryStore = Depends(get_inquiry_store),
):
    """Move an inquiry through its workflow and optionally reassign it"""
    status = None
    if update.status is not None:
        try:
            status = InquiryStatus(update.status)
        except ValueError:
            valid = ", ".join(member.value for member in InquiryStatus)
            raise HTTPException(status_code=400, detail=f"Invalid status. Valid statuses: {valid}")

    inquiry = store.update_status(inquiry_id, status=status, assigned_to=update.assigned_to)
    if not inquiry:
        raise HTTPException(status_code=404, detail="Inquiry not found")

    return StatusUpdateResponse(
        message="Inquiry updated successfully",
        inquiry=inquiry,
        updated_at=datetime.now(timezone.utc)
    )


@router.post("/contact/inquiries/{inquiry_id}/resend", response_model=ResendResponse)
async def resend_inquiry_emails(
    inquiry_id: str,
    store: InquiryStore = Depends(get_inquiry_store),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Send the acknowledgement and the department alert again"""
    inquiry = store.get(inquiry_id)
    if not inquiry:
        raise HTTPException(status_code=404, detail="Inquiry not found")

    outcomes = await dispatcher.dispatch_inquiry(inquiry)
    labels = {
        NotificationKind.INQUIRY_ACKNOWLEDGEMENT: "customer",
        NotificationKind.INQUIRY_INTERNAL: "internal",
    }
    results = {
        labels[outcome.kind]: "sent" if outcome.delivered else "failed"
        for outcome in outcomes
    }
    delivered = all(outcome.delivered for outcome in outcomes)

    logger.info("inquiry_emails_resent", inquiry_id=inquiry.id, **results)
    return ResendResponse(
        success=delivered,
        message="Emails resent successfully" if delivered else "Some emails could not be sent",
        results=results
    )
