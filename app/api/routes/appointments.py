from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.api.schemas.appointment import (
    AdminBookingRequest,
    AdminBookingResponse,
    BookedSlotsResponse,
    CancelAppointmentRequest,
)
from app.api.schemas.auth import MessageResponse
from app.core.config import settings
from app.core.db import get_session
from app.core.errors import InvalidInput
from app.models.admin import Admin
from app.models.appointment import (
    Appointment,
    AppointmentDetail,
    AppointmentPublic,
    CancelledAppointment,
    CancelledAppointmentPublic,
)
from app.services.appointment_service import (
    cancel_appointment,
    get_custom_field_values,
    get_owned_appointment,
    list_appointments,
    list_appointments_between,
    list_cancelled_appointments,
    list_cancelled_between,
)
from app.services.booking_service import create_admin_appointment, list_booked_slots
from app.services.email_service import send_booking_emails, send_cancellation_emails
from app.services.slot_service import format_in_zone, local_day_bounds

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _to_public(a: Appointment) -> AppointmentPublic:
    return AppointmentPublic(
        id=a.id,
        admin_id=a.admin_id,
        slug_id=a.slug_id,
        client_name=a.client_name,
        client_email=a.client_email,
        appointment_date=a.appointment_date,
        details=a.details,
        created_at=a.created_at,
    )


def _to_cancelled_public(a: CancelledAppointment) -> CancelledAppointmentPublic:
    return CancelledAppointmentPublic(
        id=a.id,
        admin_id=a.admin_id,
        slug_id=a.slug_id,
        client_name=a.client_name,
        client_email=a.client_email,
        appointment_date=a.appointment_date,
        details=a.details,
        created_at=a.created_at,
        cancelled_at=a.cancelled_at,
    )


def _day_range(date_param: str | None):
    day = local_day_bounds(date_param, settings.default_timezone)
    if not day.ok:
        raise InvalidInput(day.error)
    return day.start, day.end


@router.get("", response_model=list[AppointmentPublic])
async def list_my_appointments(
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> list[AppointmentPublic]:
    appointments = await list_appointments(session, current_admin.id)
    return [_to_public(a) for a in appointments]


@router.get("/by-date", response_model=list[AppointmentPublic])
async def list_appointments_by_date(
    date_param: str | None = Query(None, alias="date"),
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> list[AppointmentPublic]:
    """Appointments on a calendar day of the default time zone."""
    start, end = _day_range(date_param)
    appointments = await list_appointments_between(session, current_admin.id, start, end)
    if not appointments:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No meeting was booked for the date {date_param}.",
        )
    return [_to_public(a) for a in appointments]


@router.get("/booked-slots", response_model=BookedSlotsResponse)
async def my_booked_slots(
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> BookedSlotsResponse:
    tz = settings.default_timezone
    slots = await list_booked_slots(session, current_admin.id)
    return BookedSlotsResponse(timezone=tz, booked_slots=[format_in_zone(s, tz) for s in slots])


@router.get("/cancelled", response_model=list[CancelledAppointmentPublic])
async def list_my_cancelled(
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> list[CancelledAppointmentPublic]:
    cancelled = await list_cancelled_appointments(session, current_admin.id)
    return [_to_cancelled_public(a) for a in cancelled]


@router.get("/cancelled/by-date", response_model=list[CancelledAppointmentPublic])
async def list_my_cancelled_by_date(
    date_param: str | None = Query(None, alias="date"),
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> list[CancelledAppointmentPublic]:
    start, end = _day_range(date_param)
    cancelled = await list_cancelled_between(session, current_admin.id, start, end)
    if not cancelled:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No cancelled appointments found for the date {date_param}.",
        )
    return [_to_cancelled_public(a) for a in cancelled]


@router.post("", response_model=AdminBookingResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    body: AdminBookingRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> AdminBookingResponse:
    booking = await create_admin_appointment(
        session,
        current_admin.id,
        client_name=body.client_name,
        client_email=body.client_email,
        appointment_date=body.appointment_date,
        client_timezone=body.client_timezone,
        details=body.details,
        thank_you_message=body.thank_you_message,
    )
    appointment = booking.appointment
    background_tasks.add_task(
        send_booking_emails,
        client_name=appointment.client_name,
        client_email=appointment.client_email,
        appointment_date=appointment.appointment_date,
        details=appointment.details,
        client_timezone=booking.client_timezone,
        admin_email=current_admin.notification_email,
    )
    return AdminBookingResponse(message="Appointment created successfully!", appointment=_to_public(appointment))


@router.get("/{appointment_id}", response_model=AppointmentDetail)
async def get_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> AppointmentDetail:
    appointment = await get_owned_appointment(session, appointment_id, current_admin.id)
    custom_fields = await get_custom_field_values(session, appointment.id)
    return AppointmentDetail(**_to_public(appointment).model_dump(), custom_fields=custom_fields)


@router.delete("/{appointment_id}", response_model=MessageResponse)
async def cancel_my_appointment(
    appointment_id: int,
    background_tasks: BackgroundTasks,
    body: CancelAppointmentRequest | None = None,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> MessageResponse:
    cancelled = await cancel_appointment(session, appointment_id, current_admin.id)
    background_tasks.add_task(
        send_cancellation_emails,
        client_name=cancelled.client_name,
        client_email=cancelled.client_email,
        appointment_date=cancelled.appointment_date,
        details=cancelled.details,
        admin_email=current_admin.notification_email,
        cancellation_message=body.cancellation_message if body else None,
    )
    return MessageResponse(message="Appointment cancelled successfully and moved to history.")
