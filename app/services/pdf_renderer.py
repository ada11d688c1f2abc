"""Booking confirmation PDF

Built with reportlab's platypus flowables. The document is generated in
invariant mode, so identical input and clock produce identical bytes.
"""

import io
from datetime import datetime, timezone
from typing import List, Optional
from xml.sax.saxutils import escape

import structlog
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from app.config import Settings, settings as default_settings
from app.models import BookingRecord
from app.utils.formatting import format_date, format_datetime

logger = structlog.get_logger()

TERMS_AND_CONDITIONS = (
    "Customer must present valid driver's license and ID/passport at pickup.",
    "Security deposit is required and will be refunded upon vehicle return.",
    "Minimum rental age is 25 years.",
    "Fuel policy: Return with same level as pickup.",
    "Insurance included as per rental agreement.",
    "All uploaded documents will be kept confidential.",
)

IMPORTANT_NOTES = (
    "Please bring your original ID/passport and driving license for verification.",
    "Your security deposit receipt must be presented at pickup.",
    "Keep all booking documents for your records.",
)


def _styles():
    base = getSampleStyleSheet()
    return {
        "brand": ParagraphStyle(
            "Brand", parent=base["Title"], fontSize=25, leading=30,
            textColor=colors.HexColor("#FF6B35"), alignment=TA_CENTER
        ),
        "title": ParagraphStyle(
            "DocTitle", parent=base["Heading1"], fontSize=20, leading=24,
            textColor=colors.HexColor("#333333"), alignment=TA_CENTER
        ),
        "section": ParagraphStyle("Section", parent=base["Heading2"], fontSize=16, leading=20),
        "subsection": ParagraphStyle("Subsection", parent=base["Heading3"], fontSize=14, leading=18),
        "body": ParagraphStyle("Body", parent=base["Normal"], fontSize=12, leading=16),
        "small": ParagraphStyle("Small", parent=base["Normal"], fontSize=10, leading=14),
        "closing": ParagraphStyle("Closing", parent=base["Normal"], fontSize=12, leading=16, alignment=TA_CENTER),
        "copyright": ParagraphStyle(
            "Copyright", parent=base["Normal"], fontSize=8, leading=10,
            textColor=colors.HexColor("#666666"), alignment=TA_CENTER
        ),
    }


def _line(label: str, value: Optional[str], fallback: str = "N/A") -> str:
    return f"<b>{escape(label)}:</b> {escape(value or fallback)}"


def build_story(booking: BookingRecord, now: datetime, settings: Settings) -> List:
    """Flowables for every section of the confirmation, top to bottom"""
    styles = _styles()
    body = styles["body"]
    story = [
        Paragraph(escape(settings.company_name), styles["brand"]),
        Paragraph("Booking Confirmation", styles["title"]),
        Spacer(1, 12),
        Paragraph(_line("Booking ID", booking.id), body),
        Paragraph(_line("Date", format_datetime(booking.booking_date)), body),
        Spacer(1, 12),
        Paragraph("Customer Information", styles["section"]),
        Paragraph(_line("Name", booking.customer_name), body),
        Paragraph(_line("Email", booking.email), body),
        Paragraph(_line("Phone", booking.phone), body),
        Paragraph(_line(booking.id_label, booking.id_number), body),
    ]
    if booking.additional_info:
        story.append(Paragraph(_line("Additional Info", booking.additional_info), body))

    story += [
        Spacer(1, 12),
        Paragraph("Booking Details", styles["section"]),
        Paragraph(_line("Car Type", booking.car_type), body),
        Paragraph(_line("Pickup Date", format_date(booking.pickup_date)), body),
        Paragraph(_line("Return Date", format_date(booking.return_date)), body),
        Paragraph(_line("Pickup Location", booking.pickup_location, fallback="Main Office"), body),
    ]
    if booking.dropoff_location:
        story.append(Paragraph(_line("Drop-off Location", booking.dropoff_location), body))

    documents_complete = booking.id_document_path and booking.driving_license_path
    story += [
        Spacer(1, 12),
        Paragraph("Security Deposit Information", styles["section"]),
        Paragraph(_line(
            "Deposit Status",
            "Payment proof submitted" if booking.deposit_proof_path else "Pending"
        ), body),
        Paragraph(_line(
            "Documents Status",
            "All required documents submitted" if documents_complete else "Required documents pending"
        ), body),
        Spacer(1, 12),
        Paragraph("<u>Terms &amp; Conditions</u>", styles["subsection"]),
    ]
    story += [
        Paragraph(f"{number}. {escape(clause)}", styles["small"])
        for number, clause in enumerate(TERMS_AND_CONDITIONS, start=1)
    ]

    story += [Spacer(1, 12), Paragraph("<u>Important Notes</u>", styles["body"])]
    story += [Paragraph(f"• {escape(note)}", styles["small"]) for note in IMPORTANT_NOTES]

    story += [
        Spacer(1, 18),
        Paragraph(f"Thank you for choosing {escape(settings.company_name)}!", styles["closing"]),
        Paragraph(f"For inquiries: {escape(settings.company_contact_email)}", styles["closing"]),
        Spacer(1, 12),
        Paragraph(
            f"© {now.year} {escape(settings.company_name)}. All rights reserved.",
            styles["copyright"]
        ),
    ]
    return story


def render_booking_confirmation(
    booking: BookingRecord,
    now: Optional[datetime] = None,
    settings: Optional[Settings] = None
) -> bytes:
    """Render the confirmation PDF for a booking and return its bytes"""
    now = now or datetime.now(timezone.utc)
    settings = settings or default_settings

    buffer = io.BytesIO()
    document = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=50,
        rightMargin=50,
        topMargin=50,
        bottomMargin=50,
        title=f"Booking Confirmation {booking.id}",
        author=settings.company_name,
        invariant=True,
    )
    document.build(build_story(booking, now, settings))

    pdf = buffer.getvalue()
    logger.info("confirmation_pdf_rendered", booking_id=booking.id, size_bytes=len(pdf))
    return pdf
