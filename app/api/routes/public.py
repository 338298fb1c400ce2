from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas.appointment import (
    BookedSlotsResponse,
    BookingFormResponse,
    FormField,
    PublicBookingRequest,
    PublicBookingResponse,
)
from app.core.config import settings
from app.core.db import get_session
from app.services.booking_service import book_appointment, list_booked_slots, resolve_page
from app.services.email_service import send_booking_emails
from app.services.slot_service import format_in_zone

router = APIRouter(prefix="/public", tags=["public"])

COMPULSORY_FIELDS = [
    FormField(field_name="client_name", field_label="Your Name", field_type="text", is_required=True),
    FormField(field_name="client_email", field_label="Your Email", field_type="email", is_required=True),
]


@router.get("/{admin_slug}/{page_slug}/form", response_model=BookingFormResponse)
async def booking_form(
    admin_slug: str,
    page_slug: str,
    session: AsyncSession = Depends(get_session),
) -> BookingFormResponse:
    page = await resolve_page(session, admin_slug, page_slug)
    custom = [
        FormField(
            field_name=f.field_name,
            field_label=f.field_label,
            field_type=f.field_type,
            is_required=f.is_required,
        )
        for f in page.fields
    ]
    return BookingFormResponse(slug=page.slug, fields=COMPULSORY_FIELDS + custom)


@router.get("/{admin_slug}/{page_slug}/booked-slots", response_model=BookedSlotsResponse)
async def booked_slots(
    admin_slug: str,
    page_slug: str,
    session: AsyncSession = Depends(get_session),
) -> BookedSlotsResponse:
    """Taken start times for this admin (every page shares the admin's calendar)."""
    page = await resolve_page(session, admin_slug, page_slug)
    slots = await list_booked_slots(session, page.admin_id)
    tz = settings.default_timezone
    return BookedSlotsResponse(timezone=tz, booked_slots=[format_in_zone(s, tz) for s in slots])


@router.post(
    "/{admin_slug}/{page_slug}/book",
    response_model=PublicBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def book(
    admin_slug: str,
    page_slug: str,
    body: PublicBookingRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
) -> PublicBookingResponse:
    page = await resolve_page(session, admin_slug, page_slug)
    booking = await book_appointment(
        session,
        page,
        client_name=body.client_name,
        client_email=body.client_email,
        appointment_date=body.appointment_date,
        client_timezone=body.client_timezone,
        details=body.details,
        custom_fields=body.model_extra,
    )
    appointment = booking.appointment
    # Runs after the response; failures are logged inside and never reach the client
    background_tasks.add_task(
        send_booking_emails,
        client_name=appointment.client_name,
        client_email=appointment.client_email,
        appointment_date=appointment.appointment_date,
        details=appointment.details,
        client_timezone=booking.client_timezone,
        admin_email=page.notification_email,
        custom_data=booking.custom_data,
    )
    return PublicBookingResponse(
        message="Appointment created successfully!",
        appointment_id=appointment.id,
        appointment_date=appointment.appointment_date,
    )
