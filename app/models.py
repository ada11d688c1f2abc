"""Booking and contact inquiry records"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base model serialised with camelCase keys for the web client"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class IdType(str, Enum):
    """Kind of identity document presented by the customer"""
    ID = "id"
    PASSPORT = "passport"
    NATIONAL_ID = "national_id"


ID_TYPE_LABELS = {
    IdType.ID: "ID Number",
    IdType.PASSPORT: "Passport No",
    IdType.NATIONAL_ID: "National ID No",
}


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"


class Department(str, Enum):
    GENERAL = "general"
    BOOKING = "booking"
    CORPORATE = "corporate"
    SUPPORT = "support"


class Priority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


class InquiryStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"
    ARCHIVED = "archived"


class BookingSubmission(ApiModel):
    """Validated and normalised booking form"""
    customer_name: str
    email: str
    phone: str
    pickup_date: date
    return_date: date
    car_type: str
    pickup_location: str
    dropoff_location: Optional[str] = None
    additional_info: Optional[str] = None
    id_number: str
    id_type: IdType
    terms_accepted: bool


class BookingDocuments(ApiModel):
    """Paths of the uploaded supporting documents"""
    id_document_path: Optional[str] = None
    driving_license_path: Optional[str] = None
    deposit_proof_path: Optional[str] = None


class BookingRecord(BookingSubmission, BookingDocuments):
    """A stored booking. Frozen once created."""
    model_config = ConfigDict(frozen=True)

    id: str
    booking_date: datetime
    status: BookingStatus = BookingStatus.CONFIRMED

    @property
    def id_label(self) -> str:
        return ID_TYPE_LABELS[self.id_type]


class InquirySubmission(ApiModel):
    """Validated and normalised contact form"""
    name: str
    email: str
    phone: str = ""
    company: str = ""
    subject: str
    message: str
    department: Department


class ContactInquiry(InquirySubmission):
    """A stored contact inquiry; only status and assignee change after creation"""
    id: str
    submission_date: datetime
    status: InquiryStatus = InquiryStatus.NEW
    priority: Priority
    assigned_to: str = Field(..., description="Team the inquiry is routed to")
