"""In-memory record store for bookings and contact inquiries

Records live for the lifetime of the process only. All reads and writes go
through a lock so a listing never observes a half-appended record while the
deferred notification work runs alongside request handling.
"""

import random
import string
import threading
import time
from datetime import datetime, timezone
from typing import Callable, Dict, Generic, List, Optional, TypeVar

import structlog

from app.models import (
    BookingDocuments,
    BookingRecord,
    BookingSubmission,
    ContactInquiry,
    Department,
    InquiryStatus,
    InquirySubmission,
    Priority,
)
from app.services.triage import PRIORITY_RANK, assignee_for, determine_priority

logger = structlog.get_logger()

R = TypeVar("R", BookingRecord, ContactInquiry)

_ID_ALPHABET = string.digits + string.ascii_uppercase


def _now_ms() -> int:
    return int(time.time() * 1000)


def generate_booking_id(now_ms: Optional[int] = None) -> str:
    """"V1-" followed by the last eight digits of the millisecond clock"""
    stamp = str(now_ms if now_ms is not None else _now_ms())
    return f"V1-{stamp[-8:]}"


def generate_inquiry_id(now_ms: Optional[int] = None) -> str:
    stamp = now_ms if now_ms is not None else _now_ms()
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"CONTACT-{stamp}-{suffix}"


class RecordStore(Generic[R]):
    """Append-only list of records with exact-match lookup by id"""

    def __init__(self):
        self._records: List[R] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def _find(self, record_id: str) -> Optional[int]:
        for index, record in enumerate(self._records):
            if record.id == record_id:
                return index
        return None

    def _fresh_id(self, factory: Callable[[int], str]) -> str:
        # Caller holds the lock
        now_ms = _now_ms()
        record_id = factory(now_ms)
        while self._find(record_id) is not None:
            now_ms += 1
            record_id = factory(now_ms)
        return record_id

    def get(self, record_id: str) -> Optional[R]:
        with self._lock:
            index = self._find(record_id)
            return self._records[index] if index is not None else None

    def list(self) -> List[R]:
        with self._lock:
            return list(self._records)


class BookingStore(RecordStore[BookingRecord]):

    def create(
        self,
        submission: BookingSubmission,
        documents: Optional[BookingDocuments] = None
    ) -> BookingRecord:
        """Store a validated booking under a fresh id and return the record"""
        documents = documents or BookingDocuments()
        with self._lock:
            record = BookingRecord(
                id=self._fresh_id(generate_booking_id),
                booking_date=datetime.now(timezone.utc),
                **submission.model_dump(),
                **documents.model_dump(),
            )
            self._records.append(record)

        logger.info("booking_created", booking_id=record.id, customer_name=record.customer_name)
        return record


class InquiryStore(RecordStore[ContactInquiry]):

    def create(self, submission: InquirySubmission) -> ContactInquiry:
        """Store an inquiry, deriving its priority and assignee"""
        with self._lock:
            inquiry = ContactInquiry(
                id=self._fresh_id(generate_inquiry_id),
                submission_date=datetime.now(timezone.utc),
                priority=determine_priority(
                    submission.subject, submission.message, submission.department
                ),
                assigned_to=assignee_for(submission.department),
                **submission.model_dump(),
            )
            self._records.append(inquiry)

        logger.info(
            "inquiry_created",
            inquiry_id=inquiry.id,
            department=inquiry.department.value,
            priority=inquiry.priority.value
        )
        return inquiry

    def list_inquiries(
        self,
        department: Optional[str] = None,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[ContactInquiry]:
        """Filter by equality, then sort by priority rank and newest first"""
        inquiries = self.list()
        if department:
            inquiries = [i for i in inquiries if i.department.value == department]
        if status:
            inquiries = [i for i in inquiries if i.status.value == status]
        if priority:
            inquiries = [i for i in inquiries if i.priority.value == priority]

        inquiries.sort(key=lambda i: (PRIORITY_RANK[i.priority], -i.submission_date.timestamp()))

        if limit is not None and limit >= 0:
            inquiries = inquiries[:limit]
        return inquiries

    def update_status(
        self,
        inquiry_id: str,
        status: Optional[InquiryStatus] = None,
        assigned_to: Optional[str] = None
    ) -> Optional[ContactInquiry]:
        """Replace status and/or assignee; returns None for an unknown id"""
        changes = {}
        if status is not None:
            changes["status"] = status
        if assigned_to:
            changes["assigned_to"] = assigned_to

        with self._lock:
            index = self._find(inquiry_id)
            if index is None:
                return None
            updated = self._records[index].model_copy(update=changes)
            self._records[index] = updated

        logger.info("inquiry_status_updated", inquiry_id=inquiry_id, status=updated.status.value)
        return updated

    def stats(self) -> Dict[str, object]:
        inquiries = self.list()

        def count(attribute: str, member) -> int:
            return sum(1 for i in inquiries if getattr(i, attribute) == member)

        recent = sorted(inquiries, key=lambda i: i.submission_date, reverse=True)[:5]
        return {
            "total": len(inquiries),
            "by_status": {s.value: count("status", s) for s in InquiryStatus},
            "by_priority": {p.value: count("priority", p) for p in Priority},
            "by_department": {d.value: count("department", d) for d in Department},
            "recent_inquiries": recent,
        }


# Global store instances
booking_store = BookingStore()
inquiry_store = InquiryStore()
