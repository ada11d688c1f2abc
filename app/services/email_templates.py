"""HTML bodies for customer and staff notifications

Every value that came from a form is passed through html.escape before it is
placed in markup.
"""

from datetime import datetime
from html import escape
from urllib.parse import quote

from app.config import Settings
from app.models import BookingRecord, ContactInquiry, Priority
from app.services.triage import DepartmentInfo, estimated_response_time
from app.utils.formatting import format_date, format_datetime

UPLOADED_BADGE = '<span class="status-ok">✓ Uploaded</span>'
PENDING_BADGE = '<span class="status-pending">⏳ Pending</span>'

# (start, end) of the staff header gradient
PRIORITY_COLOURS = {
    Priority.URGENT: ("#dc2626", "#ef4444"),
    Priority.HIGH: ("#d97706", "#f59e0b"),
    Priority.NORMAL: ("#059669", "#10b981"),
    Priority.LOW: ("#059669", "#10b981"),
}


def status_badge(path) -> str:
    return UPLOADED_BADGE if path else PENDING_BADGE


def _multiline(text: str) -> str:
    return escape(text).replace("\n", "<br>")


def booking_confirmation_html(booking: BookingRecord, settings: Settings, year: int) -> str:
    """Customer-facing booking confirmation"""
    company = escape(settings.company_name)
    return f"""
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="UTF-8">
      <style>
        body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
        .header {{ background: #FF6B35; color: white; padding: 20px; text-align: center; }}
        .content {{ padding: 20px; }}
        .booking-details {{ background: #f7fafc; padding: 20px; border-radius: 5px; margin: 20px 0; }}
        .document-status {{ background: #e8f4fd; padding: 15px; border-radius: 5px; margin: 20px 0; }}
        .footer {{ background: #edf2f7; padding: 15px; text-align: center; font-size: 12px; }}
        table {{ width: 100%; border-collapse: collapse; }}
        td {{ padding: 10px; border-bottom: 1px solid #ddd; }}
        .status-ok {{ color: green; }}
        .status-pending {{ color: orange; }}
      </style>
    </head>
    <body>
      <div class="header">
        <h1>{company}</h1>
        <h2>Booking Confirmation</h2>
      </div>
      <div class="content">
        <p>Dear {escape(booking.customer_name)},</p>
        <p>Thank you for booking with {company}! Your reservation has been confirmed.</p>

        <div class="booking-details">
          <h3>Booking Summary</h3>
          <table>
            <tr><td><strong>Booking ID:</strong></td><td>{escape(booking.id)}</td></tr>
            <tr><td><strong>Car Type:</strong></td><td>{escape(booking.car_type)}</td></tr>
            <tr><td><strong>Pickup Date:</strong></td><td>{format_date(booking.pickup_date)}</td></tr>
            <tr><td><strong>Return Date:</strong></td><td>{format_date(booking.return_date)}</td></tr>
            <tr><td><strong>Pickup Location:</strong></td><td>{escape(booking.pickup_location or "Main Office")}</td></tr>
            <tr><td><strong>{booking.id_label}:</strong></td><td>{escape(booking.id_number)}</td></tr>
          </table>
        </div>

        <div class="document-status">
          <h3>Document Status</h3>
          <table>
            <tr><td><strong>ID Document:</strong></td><td>{status_badge(booking.id_document_path)}</td></tr>
            <tr><td><strong>Driving License:</strong></td><td>{status_badge(booking.driving_license_path)}</td></tr>
            <tr><td><strong>Deposit Proof:</strong></td><td>{status_badge(booking.deposit_proof_path)}</td></tr>
          </table>
        </div>

        <div style="background: #fff8e1; padding: 15px; border-radius: 5px; margin: 20px 0;">
          <h4>📋 What's Next:</h4>
          <ol>
            <li>Your booking confirmation PDF is attached.</li>
            <li>Any documents you uploaded are included in the ZIP file.</li>
            <li>Please bring your original documents for verification at pickup.</li>
            <li>Present your deposit proof receipt when collecting the vehicle.</li>
          </ol>
        </div>

        <p>Safe travels,<br>The {company} Team</p>
      </div>
      <div class="footer">
        <p><strong>{company}</strong><br>
        Kenya: {escape(settings.company_phone)} | UK: {escape(settings.company_phone_uk)}<br>
        Email: {escape(settings.company_contact_email)}</p>
        <p style="font-size: 11px; color: #666;">
          This email contains confidential information. If you received this email in error, please delete it immediately.
        </p>
        <p>© {year} {company}. All rights reserved.</p>
      </div>
    </body>
    </html>
    """


def admin_booking_html(booking: BookingRecord, has_archive: bool) -> str:
    """Staff notification for a new booking"""
    rows = [
        ("Booking ID", escape(booking.id)),
        ("Customer", escape(booking.customer_name)),
        (booking.id_label, escape(booking.id_number)),
        ("Email", escape(booking.email)),
        ("Phone", escape(booking.phone or "N/A")),
        ("Vehicle", escape(booking.car_type)),
        ("Pickup", f"{format_date(booking.pickup_date)} at {escape(booking.pickup_location)}"),
        ("Return", format_date(booking.return_date)),
        ("Drop-off", escape(booking.dropoff_location or "Same as pickup")),
        ("ID Document", status_badge(booking.id_document_path)),
        ("Driving License", status_badge(booking.driving_license_path)),
        ("Deposit Proof", status_badge(booking.deposit_proof_path)),
        ("Documents", "✅ Attached as ZIP" if has_archive else "❌ No documents"),
    ]
    table = "\n".join(
        f'<tr><td style="padding: 8px; border-bottom: 1px solid #eee;"><strong>{label}:</strong></td>'
        f'<td style="padding: 8px; border-bottom: 1px solid #eee;">{value}</td></tr>'
        for label, value in rows
    )
    special_requests = ""
    if booking.additional_info:
        special_requests = f"""
        <div style="background: #e8f4fd; padding: 15px; border-radius: 5px; margin: 15px 0;">
            <strong>Special Requests:</strong><br/>
            {_multiline(booking.additional_info)}
        </div>
        """

    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: #FF6B35;">🚗 NEW CAR BOOKING REQUEST</h2>
        <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">
            <h3 style="color: #333; border-bottom: 2px solid #FF6B35; padding-bottom: 10px;">Booking Details</h3>
            <table style="width: 100%; border-collapse: collapse;">
            {table}
            </table>
        </div>
        {special_requests}
        <div style="margin-top: 30px; padding-top: 20px; border-top: 2px solid #eee;">
            <p><strong>📅 Booking Received:</strong> {format_datetime(booking.booking_date)}</p>
            <p><strong>🔒 Terms Accepted:</strong> {"✅ Yes" if booking.terms_accepted else "❌ No"}</p>
        </div>
        <div style="background: #FF6B35; color: white; padding: 15px; border-radius: 5px; margin-top: 20px; text-align: center;">
            <p style="margin: 0; font-weight: bold;">ACTION REQUIRED: Process security deposit and verify documents</p>
        </div>
    </div>
    """


def inquiry_acknowledgement_html(
    inquiry: ContactInquiry,
    department: DepartmentInfo,
    settings: Settings,
    year: int
) -> str:
    """Customer-facing acknowledgement of a contact inquiry"""
    company = escape(settings.company_name)
    optional = ""
    if inquiry.company:
        optional += f"<p><strong>Company:</strong> {escape(inquiry.company)}</p>"
    if inquiry.phone:
        optional += f"<p><strong>Phone:</strong> {escape(inquiry.phone)}</p>"

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <title>{company} - Inquiry Received</title>
        <style>
            body {{ font-family: 'Arial', sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; }}
            .container {{ max-width: 600px; margin: 0 auto; background: #ffffff; }}
            .header {{ background: linear-gradient(135deg, #1a365d 0%, #2d3748 100%); color: white; padding: 30px; text-align: center; }}
            .content {{ padding: 30px; }}
            .inquiry-details {{ background: #f8fafc; padding: 20px; border-radius: 10px; margin: 20px 0; border-left: 4px solid #FF6B35; }}
            .priority {{ display: inline-block; padding: 5px 15px; border-radius: 20px; font-weight: bold; font-size: 12px; }}
            .priority-urgent {{ background: #fee2e2; color: #dc2626; }}
            .priority-high {{ background: #fef3c7; color: #d97706; }}
            .priority-normal, .priority-low {{ background: #d1fae5; color: #059669; }}
            .message-box {{ background: #f1f5f9; padding: 15px; border-radius: 5px; margin: 15px 0; font-style: italic; }}
            .footer {{ background: #edf2f7; padding: 20px; text-align: center; font-size: 12px; color: #6b7280; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>{company}</h1>
                <h2>Inquiry Received</h2>
            </div>
            <div class="content">
                <p>Dear {escape(inquiry.name)},</p>
                <p>Thank you for contacting {company}. Your inquiry has been received and is being processed by our {escape(department.name)} team.</p>

                <div class="inquiry-details">
                    <h3 style="margin-top: 0; color: #1a365d;">Inquiry Details:</h3>
                    <p><strong>Reference ID:</strong> {escape(inquiry.id)}</p>
                    <p><strong>Subject:</strong> {escape(inquiry.subject)}</p>
                    <p><strong>Department:</strong> {escape(department.name)}</p>
                    <p><strong>Priority:</strong> <span class="priority priority-{inquiry.priority.value}">{inquiry.priority.value.upper()}</span></p>
                    <p><strong>Estimated Response:</strong> {estimated_response_time(inquiry.priority)}</p>
                    {optional}
                </div>

                <p><strong>Your Message:</strong></p>
                <div class="message-box">{_multiline(inquiry.message)}</div>

                <p><strong>Our {escape(department.name)} team contact details:</strong></p>
                <ul>
                    <li>Email: {escape(department.email)}</li>
                    <li>Phone: {escape(department.phone)}</li>
                </ul>

                <p>Best regards,<br><strong>The {company} Team</strong></p>
            </div>
            <div class="footer">
                <p>© {year} {company}. All rights reserved.</p>
                <p style="font-size: 10px; margin-top: 10px;">This is an automated message. Please do not reply to this email.</p>
            </div>
        </div>
    </body>
    </html>
    """


def inquiry_internal_html(
    inquiry: ContactInquiry,
    department: DepartmentInfo,
    generated_at: datetime
) -> str:
    """Staff notification for a new contact inquiry"""
    start, end = PRIORITY_COLOURS[inquiry.priority]
    priority_label = inquiry.priority.value.upper()
    email = escape(inquiry.email)
    phone_line = call_button = ""
    if inquiry.phone:
        phone = escape(inquiry.phone)
        phone_line = f'<p><strong>Phone:</strong> <a href="tel:{phone}">{phone}</a></p>'
        call_button = f'<a href="tel:{phone}" class="action-btn">Call Customer</a>'
    company_line = f"<p><strong>Company:</strong> {escape(inquiry.company)}</p>" if inquiry.company else ""
    reply_subject = quote(f"Re: {inquiry.subject}")

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="UTF-8">
        <title>New Contact Inquiry - {priority_label} Priority</title>
        <style>
            body {{ font-family: 'Arial', sans-serif; line-height: 1.6; color: #333; margin: 0; padding: 0; }}
            .container {{ max-width: 700px; margin: 0 auto; background: #ffffff; }}
            .header {{ background: linear-gradient(135deg, {start} 0%, {end} 100%); color: white; padding: 25px; text-align: center; }}
            .content {{ padding: 25px; }}
            .alert-box {{ background: #fef3c7; border: 2px solid #f59e0b; padding: 15px; border-radius: 8px; margin: 15px 0; }}
            .customer-info {{ background: #f8fafc; padding: 15px; border-radius: 8px; margin: 15px 0; }}
            .action-required {{ background: #fee2e2; border-left: 4px solid #dc2626; padding: 15px; margin: 20px 0; }}
            .action-btn {{ padding: 10px; text-align: center; background: #3b82f6; color: white; text-decoration: none; border-radius: 5px; }}
            .footer {{ background: #f1f5f9; padding: 15px; text-align: center; font-size: 12px; color: #6b7280; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>⚠️ NEW CONTACT INQUIRY</h1>
                <h2>Priority: {priority_label}</h2>
                <p>Department: {escape(department.name)}</p>
            </div>
            <div class="content">
                <div class="alert-box">
                    <p><strong>⚠️ Action Required:</strong> New inquiry assigned to {escape(department.name)} team</p>
                    <p><strong>Estimated Response Time:</strong> {estimated_response_time(inquiry.priority)}</p>
                </div>
                <div class="customer-info">
                    <h3 style="margin-top: 0; color: #1a365d;">Customer Information:</h3>
                    <p><strong>Name:</strong> {escape(inquiry.name)}</p>
                    <p><strong>Email:</strong> <a href="mailto:{email}">{email}</a></p>
                    {phone_line}
                    {company_line}
                </div>
                <h3>Inquiry Details:</h3>
                <p><strong>Reference ID:</strong> {escape(inquiry.id)}</p>
                <p><strong>Subject:</strong> {escape(inquiry.subject)}</p>
                <p><strong>Submitted:</strong> {format_datetime(inquiry.submission_date)}</p>
                <p><strong>Assigned To:</strong> {escape(inquiry.assigned_to)}</p>
                <div class="action-required">
                    <h3 style="margin-top: 0; color: #dc2626;">📝 Customer Message:</h3>
                    <p>{_multiline(inquiry.message)}</p>
                </div>
                <p>
                    <a href="mailto:{email}?subject={reply_subject}" class="action-btn">Reply to Customer</a>
                    {call_button}
                    <a href="mailto:{escape(department.email)}" class="action-btn">Internal Discussion</a>
                </p>
            </div>
            <div class="footer">
                <p>Contact Management System</p>
                <p>Generated: {format_datetime(generated_at)}</p>
            </div>
        </div>
    </body>
    </html>
    """
