import logging
import smtplib
from collections.abc import Callable
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core.config import settings
from app.services.slot_service import format_in_zone

logger = logging.getLogger(__name__)

DATE_TIME_FORMAT = "%B %d, %Y at %I:%M %p"
DATE_FORMAT = "%B %d, %Y"


def _send_email_sync(to_email: str, subject: str, html_body: str) -> bool:
    """Send email via SMTP (blocking). Returns True when the server accepted it."""
    if not settings.email_enabled:
        logger.debug("Email disabled (SMTP not configured), skipping send to %s", to_email)
        return False
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.from_name} <{settings.from_email}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.from_email, [to_email], msg.as_string())
        logger.info("Email sent to %s", to_email)
        return True
    except Exception as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)
        return False


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _quote_block(message: str | None) -> str:
    if not message:
        return ""
    return (
        '<p style="margin:0 0 24px 0;padding:10px 14px;border-left:3px solid #d1d5db;'
        f'font-style:italic;color:#374151;">{_html_escape(message)}</p>'
    )


def _detail_rows(rows: list[tuple[str, str]]) -> str:
    items = "".join(
        f'<p style="margin:12px 0 0 0;font-size:12px;text-transform:uppercase;letter-spacing:0.5px;color:#6b7280;">{_html_escape(label)}</p>'
        f'<p style="margin:0;font-size:16px;font-weight:600;color:#111827;">{_html_escape(value)}</p>'
        for label, value in rows
    )
    return f"""
              <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background:#f9fafb;border-radius:8px;margin-bottom:24px;">
                <tr>
                  <td style="padding:8px 24px 20px 24px;">{items}</td>
                </tr>
              </table>"""


def _render_layout(title: str, heading: str, body_html: str) -> str:
    logo_html = ""
    if settings.email_logo_url:
        logo_html = f'<img src="{settings.email_logo_url}" alt="{settings.site_name}" width="120" style="display:block;margin-bottom:24px;" />'
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="margin:0;padding:0;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,Oxygen,Ubuntu,sans-serif;background-color:#f3f4f6;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="background-color:#f3f4f6;">
    <tr>
      <td align="center" style="padding:40px 16px;">
        <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:560px;background:#ffffff;border-radius:12px;box-shadow:0 4px 6px rgba(0,0,0,0.05);overflow:hidden;">
          <tr>
            <td style="padding:32px 32px 24px 32px;">
              {logo_html}
              <h1 style="margin:0 0 8px 0;font-size:22px;font-weight:600;color:#111827;">{heading}</h1>
              {body_html}
            </td>
          </tr>
          <tr>
            <td style="padding:24px 32px 32px 32px;background:#f9fafb;border-top:1px solid #e5e7eb;">
              <p style="margin:0;font-size:13px;font-weight:600;color:#111827;">{settings.site_name}</p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def _paragraph(text: str) -> str:
    return f'<p style="margin:0 0 16px 0;font-size:15px;color:#374151;">{text}</p>'


def build_booking_confirmation_html(
    client_name: str,
    appointment_date: datetime,
    client_timezone: str,
    details: str | None,
    custom_data: dict[str, str] | None = None,
) -> str:
    rows = [
        ("Date & Time", f"{format_in_zone(appointment_date, client_timezone, DATE_TIME_FORMAT)} ({client_timezone})"),
        ("Details", details or "N/A"),
    ]
    rows.extend((label, value) for label, value in (custom_data or {}).items())
    body = (
        _paragraph(f"Hi {_html_escape(client_name or 'there')}, your appointment has been successfully booked.")
        + _detail_rows(rows)
        + _paragraph("We look forward to meeting with you!")
    )
    return _render_layout("Appointment Confirmation", "Appointment Confirmed", body)


def build_admin_booking_html(
    client_name: str,
    client_email: str,
    appointment_date: datetime,
    client_timezone: str,
    details: str | None,
    custom_data: dict[str, str] | None = None,
) -> str:
    app_tz = settings.default_timezone
    rows = [
        ("Client Name", client_name),
        ("Client Email", client_email),
        (f"Time ({app_tz})", format_in_zone(appointment_date, app_tz, DATE_TIME_FORMAT)),
        (f"Time ({client_timezone})", format_in_zone(appointment_date, client_timezone, DATE_TIME_FORMAT)),
        ("Details", details or "N/A"),
    ]
    rows.extend((label, value) for label, value in (custom_data or {}).items())
    body = _paragraph("A new appointment has been booked.") + _detail_rows(rows)
    return _render_layout("New Appointment", "New Appointment", body)


def _send_guarded(to_email: str, subject: str, build_html: Callable[[], str]) -> bool:
    """Render and send one notice; failures are logged so other recipients still get theirs."""
    try:
        return _send_email_sync(to_email, subject, build_html())
    except Exception as e:
        logger.exception("Error sending '%s' to %s: %s", subject, to_email, e)
        return False


def send_booking_emails(
    *,
    client_name: str,
    client_email: str,
    appointment_date: datetime,
    details: str | None,
    client_timezone: str | None,
    admin_email: str | None,
    custom_data: dict[str, str] | None = None,
) -> None:
    """Confirmation to the client and a notice to the admin (call from background task)."""
    tz = client_timezone or settings.default_timezone
    _send_guarded(
        client_email,
        "Your Appointment is Confirmed!",
        lambda: build_booking_confirmation_html(client_name, appointment_date, tz, details, custom_data),
    )
    if admin_email:
        _send_guarded(
            admin_email,
            f"New Appointment with {client_name}",
            lambda: build_admin_booking_html(client_name, client_email, appointment_date, tz, details, custom_data),
        )


def _cancellation_when(appointment_date: datetime) -> str:
    app_tz = settings.default_timezone
    return f"{format_in_zone(appointment_date, app_tz, DATE_TIME_FORMAT)} ({app_tz})"


def send_cancellation_emails(
    *,
    client_name: str,
    client_email: str,
    appointment_date: datetime,
    details: str | None,
    admin_email: str | None,
    cancellation_message: str | None = None,
) -> None:
    """Cancellation notice to client (with the admin's message verbatim) and admin."""

    def client_html() -> str:
        body = (
            _paragraph(f"Hi {_html_escape(client_name)}, this is a confirmation that your appointment has been cancelled.")
            + _quote_block(cancellation_message)
            + _detail_rows([("Date & Time", _cancellation_when(appointment_date)), ("Details", details or "N/A")])
            + _paragraph("If you believe this was a mistake, please contact us to reschedule.")
        )
        return _render_layout("Appointment Cancelled", "Appointment Cancelled", body)

    def admin_html() -> str:
        body = _paragraph("An appointment has been cancelled.") + _detail_rows(
            [("Client Name", client_name), ("Client Email", client_email), ("Time", _cancellation_when(appointment_date))]
        )
        return _render_layout("Appointment Cancelled", "Appointment Cancelled", body)

    _send_guarded(client_email, "Your Appointment has been Cancelled", client_html)
    if admin_email:
        _send_guarded(admin_email, f"Appointment Cancelled with {client_name}", admin_html)


def send_reminder_email(
    *,
    client_name: str,
    client_email: str,
    appointment_date: datetime,
    details: str | None,
    message: str | None,
) -> bool:
    app_tz = settings.default_timezone
    body = (
        _paragraph(f"Hi {_html_escape(client_name)}, this is a friendly reminder about your upcoming appointment.")
        + _quote_block(message)
        + _detail_rows(
            [
                ("Date & Time", f"{format_in_zone(appointment_date, app_tz, DATE_TIME_FORMAT)} ({app_tz})"),
                ("Details", details or "N/A"),
            ]
        )
        + _paragraph("We look forward to seeing you soon!")
    )
    return _send_email_sync(
        client_email,
        "Reminder: Your Appointment is Soon!",
        _render_layout("Appointment Reminder", "Appointment Reminder", body),
    )


def send_thank_you_email(
    *,
    client_name: str,
    client_email: str,
    appointment_date: datetime,
    message: str | None,
) -> bool:
    day = format_in_zone(appointment_date, settings.default_timezone, DATE_FORMAT)
    body = (
        _paragraph(f"Hi {_html_escape(client_name)}, just a quick note to say thank you for your meeting with us on {day}.")
        + _quote_block(message)
        + _paragraph("We appreciate your time and look forward to our next steps together.")
        + _paragraph(f"Best regards,<br/>The {settings.site_name} Team")
    )
    return _send_email_sync(
        client_email,
        "Thank you for our meeting!",
        _render_layout("Thank You", "Thank You", body),
    )


def send_password_reset_email(to_email: str, reset_token: str) -> bool:
    link = f"{settings.frontend_url.rstrip('/')}/reset-password/{reset_token}"
    body = (
        _paragraph("You requested a password reset. Use the link below to choose a new password.")
        + _paragraph(f'<a href="{_html_escape(link)}">{_html_escape(link)}</a>')
        + _paragraph(
            f"This link expires in {settings.password_reset_expire_minutes} minutes. "
            "If you did not request a reset, you can ignore this email."
        )
    )
    return _send_email_sync(
        to_email,
        f"{settings.site_name} – Password Reset",
        _render_layout("Password Reset", "Password Reset", body),
    )
