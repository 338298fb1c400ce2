"""Slot reservation for public booking pages and admin-created appointments.

A reservation writes the appointment, its custom field answers and the
follow-up thank-you message in one transaction. The conflict check inside
that transaction is backed by the unique (admin_id, appointment_date)
constraint, so when two requests race for the same instant the loser gets
``SlotConflict`` rather than a database error.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import InvalidInput, NotFoundOrForbidden, SlotConflict
from app.models.admin import Admin
from app.models.appointment import Appointment, AppointmentFieldValue
from app.models.booking_page import BookingPage, BookingPageField
from app.models.scheduled_message import ThankYouMessage
from app.services.booking_page_service import get_fields
from app.services.slot_service import INVALID_TIME_MESSAGE, thank_you_send_time, to_utc

logger = logging.getLogger(__name__)

INVALID_LINK_MESSAGE = "This booking link is not valid."
SERIALIZATION_FAILURE = "40001"


@dataclass(frozen=True)
class PageContext:
    admin_id: int
    notification_email: str
    slug_id: int
    slug: str
    fields: list[BookingPageField]


@dataclass
class Booking:
    appointment: Appointment
    client_timezone: str
    # label -> value, for notification emails
    custom_data: dict[str, str] = field(default_factory=dict)


async def resolve_page(session: AsyncSession, admin_slug: str, page_slug: str) -> PageContext:
    """Find the booking page ``page_slug`` of the admin whose public slug is ``admin_slug``."""
    result = await session.execute(select(Admin).where(Admin.unique_link_slug == admin_slug))
    admin = result.scalar_one_or_none()
    if not admin:
        raise NotFoundOrForbidden(INVALID_LINK_MESSAGE)
    result = await session.execute(
        select(BookingPage).where(BookingPage.admin_id == admin.id, BookingPage.slug == page_slug)
    )
    page = result.scalar_one_or_none()
    if not page:
        raise NotFoundOrForbidden(INVALID_LINK_MESSAGE)
    return PageContext(
        admin_id=admin.id,
        notification_email=admin.notification_email,
        slug_id=page.id,
        slug=page.slug,
        fields=await get_fields(session, page.id),
    )


def _is_write_conflict(exc: DBAPIError) -> bool:
    if isinstance(exc, IntegrityError):
        return True
    code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
    return code == SERIALIZATION_FAILURE


def _require_booking_input(client_name: str | None, client_email: str | None, appointment_date: Any) -> None:
    if not client_name or not client_email or not appointment_date:
        raise InvalidInput("Name, email, and date are required.")


def _thank_you_time(appointment_date: datetime) -> datetime:
    try:
        return thank_you_send_time(appointment_date)
    except OverflowError:
        # Appointment too close to datetime.max to schedule the follow-up
        raise InvalidInput(INVALID_TIME_MESSAGE) from None


def _match_custom_fields(
    fields: list[BookingPageField], values: dict[str, Any] | None
) -> list[tuple[BookingPageField, str]]:
    """Pair submitted values with the page's field definitions; unknown keys are ignored."""
    values = values or {}
    matched = []
    for f in fields:
        value = values.get(f.field_name)
        if value is None or value == "":
            continue
        matched.append((f, value if isinstance(value, str) else str(value)))
    return matched


async def _reserve(
    session: AsyncSession,
    *,
    admin_id: int,
    slug_id: int | None,
    client_name: str,
    client_email: str,
    appointment_date: datetime,
    details: str | None,
    field_values: list[tuple[BookingPageField, str]],
    thank_you_at: datetime,
    thank_you_message: str | None = None,
) -> Appointment:
    try:
        result = await session.execute(
            select(Appointment.id)
            .where(Appointment.admin_id == admin_id, Appointment.appointment_date == appointment_date)
            .with_for_update()
        )
        if result.first() is not None:
            raise SlotConflict()

        appointment = Appointment(
            admin_id=admin_id,
            slug_id=slug_id,
            client_name=client_name,
            client_email=client_email,
            appointment_date=appointment_date,
            details=details,
        )
        session.add(appointment)
        try:
            await session.flush()
        except DBAPIError as e:
            if _is_write_conflict(e):
                raise SlotConflict() from e
            raise

        for f, value in field_values:
            session.add(
                AppointmentFieldValue(
                    appointment_id=appointment.id,
                    slug_field_id=f.id,
                    field_name=f.field_name,
                    field_value=value,
                )
            )
        session.add(
            ThankYouMessage(
                appointment_id=appointment.id,
                send_time=thank_you_at,
                message=thank_you_message,
            )
        )
        try:
            await session.commit()
        except DBAPIError as e:
            if _is_write_conflict(e):
                raise SlotConflict() from e
            raise
    except Exception:
        await session.rollback()
        raise
    logger.info("Reserved appointment %s for admin %s at %s UTC", appointment.id, admin_id, appointment_date)
    return appointment


async def book_appointment(
    session: AsyncSession,
    page: PageContext,
    *,
    client_name: str | None,
    client_email: str | None,
    appointment_date: str | None,
    client_timezone: str | None = None,
    details: str | None = None,
    custom_fields: dict[str, Any] | None = None,
) -> Booking:
    """Book ``appointment_date`` (local to ``client_timezone``) through a public page."""
    _require_booking_input(client_name, client_email, appointment_date)
    tz = client_timezone or settings.default_timezone
    conv = to_utc(appointment_date, tz)
    if not conv.ok:
        raise InvalidInput(conv.error)

    matched = _match_custom_fields(page.fields, custom_fields)
    appointment = await _reserve(
        session,
        admin_id=page.admin_id,
        slug_id=page.slug_id,
        client_name=client_name,
        client_email=client_email,
        appointment_date=conv.value,
        details=details,
        field_values=matched,
        thank_you_at=_thank_you_time(conv.value),
    )
    return Booking(
        appointment=appointment,
        client_timezone=tz,
        custom_data={f.field_label: value for f, value in matched},
    )


async def create_admin_appointment(
    session: AsyncSession,
    admin_id: int,
    *,
    client_name: str | None,
    client_email: str | None,
    appointment_date: str | None,
    client_timezone: str | None = None,
    details: str | None = None,
    thank_you_message: str | None = None,
) -> Booking:
    """Admin-side booking with no page; may set the thank-you text up front."""
    _require_booking_input(client_name, client_email, appointment_date)
    tz = client_timezone or settings.default_timezone
    conv = to_utc(appointment_date, tz)
    if not conv.ok:
        raise InvalidInput(conv.error)
    appointment = await _reserve(
        session,
        admin_id=admin_id,
        slug_id=None,
        client_name=client_name,
        client_email=client_email,
        appointment_date=conv.value,
        details=details,
        field_values=[],
        thank_you_at=_thank_you_time(conv.value),
        thank_you_message=thank_you_message,
    )
    return Booking(appointment=appointment, client_timezone=tz)


async def list_booked_slots(session: AsyncSession, admin_id: int) -> list[datetime]:
    """Start instants (naive UTC) of the admin's active appointments, across all pages."""
    result = await session.execute(
        select(Appointment.appointment_date)
        .where(Appointment.admin_id == admin_id)
        .order_by(Appointment.appointment_date)
    )
    return [row[0] for row in result.all()]
