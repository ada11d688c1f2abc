"""Tests for inquiry priority and department routing"""

import pytest

from app.config import Settings
from app.models import Department, Priority
from app.services.triage import (
    DEPARTMENT_ASSIGNEES,
    DEPARTMENT_NAMES,
    DEPARTMENT_PRIORITY,
    PRIORITY_RANK,
    RESPONSE_TIMES,
    department_info,
    determine_priority,
    estimated_response_time,
)


def test_routing_tables_cover_every_member():
    for table in (DEPARTMENT_NAMES, DEPARTMENT_PRIORITY, DEPARTMENT_ASSIGNEES):
        assert set(table) == set(Department)
    for table in (PRIORITY_RANK, RESPONSE_TIMES):
        assert set(table) == set(Priority)


@pytest.mark.parametrize("subject, message, department, expected", [
    ("Accident on highway", "Please help", Department.GENERAL, Priority.URGENT),
    ("Hello", "We are STRANDED near Naivasha", Department.BOOKING, Priority.URGENT),
    ("Partnership", "Fleet for our business", Department.GENERAL, Priority.HIGH),
    ("Question", "What are your rates?", Department.GENERAL, Priority.NORMAL),
    ("Question", "What are your rates?", Department.SUPPORT, Priority.URGENT),
    ("Question", "What are your rates?", Department.CORPORATE, Priority.HIGH),
    ("Emergency", "Need a car asap", Department.CORPORATE, Priority.URGENT),
])
def test_determine_priority(subject, message, department, expected):
    assert determine_priority(subject, message, department) == expected


def test_estimated_response_time():
    assert estimated_response_time(Priority.URGENT) == "Within 30 minutes"
    assert estimated_response_time(Priority.NORMAL) == "Within 4 business hours"


def test_department_info_falls_back_to_admin_mailbox():
    settings = Settings(admin_email="admin@example.com", department_corporate_email="")

    info = department_info(Department.CORPORATE, settings)

    assert info.name == "Corporate Services"
    assert info.email == "admin@example.com"
