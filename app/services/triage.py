"""Department routing and priority rules for contact inquiries"""

from typing import Dict, NamedTuple

from app.config import Settings
from app.models import Department, Priority


class DepartmentInfo(NamedTuple):
    name: str
    email: str
    phone: str


URGENT_KEYWORDS = (
    "urgent", "emergency", "immediately", "asap", "critical",
    "broken down", "accident", "stranded",
)
HIGH_KEYWORDS = (
    "important", "priority", "corporate", "business", "enterprise",
    "partnership", "executive", "ceo",
)

DEPARTMENT_NAMES: Dict[Department, str] = {
    Department.GENERAL: "Executive Office",
    Department.BOOKING: "Premium Reservations",
    Department.CORPORATE: "Corporate Services",
    Department.SUPPORT: "Premium Support",
}

# Floor applied on top of keyword matching
DEPARTMENT_PRIORITY: Dict[Department, Priority] = {
    Department.GENERAL: Priority.NORMAL,
    Department.BOOKING: Priority.NORMAL,
    Department.CORPORATE: Priority.HIGH,
    Department.SUPPORT: Priority.URGENT,
}

DEPARTMENT_ASSIGNEES: Dict[Department, str] = {
    Department.GENERAL: "executive-team",
    Department.BOOKING: "reservations-team",
    Department.CORPORATE: "corporate-team",
    Department.SUPPORT: "concierge-team",
}

PRIORITY_RANK: Dict[Priority, int] = {
    Priority.URGENT: 0,
    Priority.HIGH: 1,
    Priority.NORMAL: 2,
    Priority.LOW: 3,
}

RESPONSE_TIMES: Dict[Priority, str] = {
    Priority.URGENT: "Within 30 minutes",
    Priority.HIGH: "Within 2 hours",
    Priority.NORMAL: "Within 4 business hours",
    Priority.LOW: "Within 24 hours",
}


def determine_priority(subject: str, message: str, department: Department) -> Priority:
    """Derive inquiry priority from keywords, raised to the department's floor"""
    text = f"{subject} {message}".lower()

    if any(keyword in text for keyword in URGENT_KEYWORDS):
        keyword_priority = Priority.URGENT
    elif any(keyword in text for keyword in HIGH_KEYWORDS):
        keyword_priority = Priority.HIGH
    else:
        keyword_priority = Priority.NORMAL

    floor = DEPARTMENT_PRIORITY[department]
    return min(keyword_priority, floor, key=PRIORITY_RANK.__getitem__)


def assignee_for(department: Department) -> str:
    return DEPARTMENT_ASSIGNEES[department]


def estimated_response_time(priority: Priority) -> str:
    return RESPONSE_TIMES[priority]


def department_info(department: Department, settings: Settings) -> DepartmentInfo:
    """Display name, mailbox and phone line for a department"""
    mailboxes = {
        Department.GENERAL: settings.department_general_email,
        Department.BOOKING: settings.department_booking_email,
        Department.CORPORATE: settings.department_corporate_email,
        Department.SUPPORT: settings.department_support_email,
    }
    return DepartmentInfo(
        name=DEPARTMENT_NAMES[department],
        email=mailboxes[department] or settings.admin_email,
        phone=settings.company_phone,
    )
