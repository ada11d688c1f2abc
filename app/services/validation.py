"""Validation and normalisation of booking and contact submissions

Validators are pure functions over the raw form mapping. They collect every
violation instead of stopping at the first one, so the client can correct
the whole form in one round trip.
"""

import re
from datetime import date, datetime
from typing import Any, Generic, List, Mapping, Optional, TypeVar

import dateparser
from pydantic import BaseModel

from app.models import (
    BookingSubmission,
    Department,
    IdType,
    InquirySubmission,
)

T = TypeVar("T")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

BOOKING_REQUIRED_FIELDS = (
    "customerName", "email", "phone", "pickupDate", "returnDate",
    "carType", "pickupLocation", "idNumber", "idType",
)
INQUIRY_REQUIRED_FIELDS = ("name", "email", "subject", "message", "department")


class FieldError(BaseModel):
    """A single violation tied to the client-facing field name"""
    field: str
    message: str


class ValidationResult(BaseModel, Generic[T]):
    value: Optional[T] = None
    errors: List[FieldError] = []

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _clean(raw: Mapping[str, Any], field: str) -> str:
    value = raw.get(field)
    if value is None:
        return ""
    return str(value).strip()


def _optional(raw: Mapping[str, Any], field: str) -> Optional[str]:
    return _clean(raw, field) or None


def parse_date(value: str) -> Optional[date]:
    """Parse an ISO date, falling back to a strict natural-language parse"""
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        pass
    parsed = dateparser.parse(value, settings={"STRICT_PARSING": True})
    return parsed.date() if parsed else None


def coerce_consent(value: Any) -> bool:
    """Accept a real boolean or the literal string "true" from form posts"""
    if isinstance(value, bool):
        return value
    return value == "true"


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def _missing(raw: Mapping[str, Any], fields) -> List[FieldError]:
    return [
        FieldError(field=field, message=f"{field} is required")
        for field in fields
        if not _clean(raw, field)
    ]


def validate_booking(raw: Mapping[str, Any]) -> ValidationResult[BookingSubmission]:
    errors = _missing(raw, BOOKING_REQUIRED_FIELDS)
    missing = {error.field for error in errors}

    email = _clean(raw, "email").lower()
    if "email" not in missing and not is_valid_email(email):
        errors.append(FieldError(field="email", message="Invalid email format"))

    pickup_date = return_date = None
    if "pickupDate" not in missing:
        pickup_date = parse_date(_clean(raw, "pickupDate"))
        if pickup_date is None:
            errors.append(FieldError(field="pickupDate", message="pickupDate is not a valid date"))
    if "returnDate" not in missing:
        return_date = parse_date(_clean(raw, "returnDate"))
        if return_date is None:
            errors.append(FieldError(field="returnDate", message="returnDate is not a valid date"))
    if pickup_date and return_date and return_date <= pickup_date:
        errors.append(FieldError(field="returnDate", message="returnDate must be after pickupDate"))

    id_type = _clean(raw, "idType").lower()
    valid_id_types = [member.value for member in IdType]
    if "idType" not in missing and id_type not in valid_id_types:
        errors.append(FieldError(
            field="idType",
            message=f"Invalid idType. Valid values: {', '.join(valid_id_types)}"
        ))

    terms_accepted = coerce_consent(raw.get("termsAccepted"))
    if not terms_accepted:
        errors.append(FieldError(
            field="termsAccepted",
            message="Terms and conditions must be accepted"
        ))

    if errors:
        return ValidationResult(errors=errors)

    submission = BookingSubmission(
        customer_name=_clean(raw, "customerName"),
        email=email,
        phone=_clean(raw, "phone"),
        pickup_date=pickup_date,
        return_date=return_date,
        car_type=_clean(raw, "carType"),
        pickup_location=_clean(raw, "pickupLocation"),
        dropoff_location=_optional(raw, "dropoffLocation"),
        additional_info=_optional(raw, "additionalInfo"),
        id_number=_clean(raw, "idNumber"),
        id_type=IdType(id_type),
        terms_accepted=True,
    )
    return ValidationResult(value=submission)


def validate_inquiry(raw: Mapping[str, Any]) -> ValidationResult[InquirySubmission]:
    errors = _missing(raw, INQUIRY_REQUIRED_FIELDS)
    missing = {error.field for error in errors}

    email = _clean(raw, "email").lower()
    if "email" not in missing and not is_valid_email(email):
        errors.append(FieldError(field="email", message="Invalid email format"))

    department = _clean(raw, "department").lower()
    valid_departments = [member.value for member in Department]
    if "department" not in missing and department not in valid_departments:
        errors.append(FieldError(
            field="department",
            message=f"Invalid department specified. Valid departments: {', '.join(valid_departments)}"
        ))

    if errors:
        return ValidationResult(errors=errors)

    submission = InquirySubmission(
        name=_clean(raw, "name"),
        email=email,
        phone=_clean(raw, "phone"),
        company=_clean(raw, "company"),
        subject=_clean(raw, "subject"),
        message=_clean(raw, "message"),
        department=Department(department),
    )
    return ValidationResult(value=submission)
