from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundOrForbidden
from app.models.appointment import Appointment, AppointmentFieldValue, CancelledAppointment
from app.services.slot_service import utc_naive_now

APPOINTMENT_NOT_FOUND = "Appointment not found or you do not have permission to access it."


async def get_owned_appointment(
    session: AsyncSession, appointment_id: int, admin_id: int, *, for_update: bool = False
) -> Appointment:
    """The admin's active appointment; missing and foreign ones look the same."""
    q = select(Appointment).where(Appointment.id == appointment_id, Appointment.admin_id == admin_id)
    if for_update:
        q = q.with_for_update()
    result = await session.execute(q)
    appointment = result.scalar_one_or_none()
    if not appointment:
        raise NotFoundOrForbidden(APPOINTMENT_NOT_FOUND)
    return appointment


async def get_custom_field_values(session: AsyncSession, appointment_id: int) -> dict[str, str]:
    result = await session.execute(
        select(AppointmentFieldValue)
        .where(AppointmentFieldValue.appointment_id == appointment_id)
        .order_by(AppointmentFieldValue.id)
    )
    return {v.field_name: v.field_value for v in result.scalars().all()}


async def list_appointments(session: AsyncSession, admin_id: int) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(Appointment.admin_id == admin_id)
        .order_by(Appointment.appointment_date.desc())
    )
    return list(result.scalars().all())


async def list_appointments_between(
    session: AsyncSession, admin_id: int, start: datetime, end: datetime
) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(
            Appointment.admin_id == admin_id,
            Appointment.appointment_date >= start,
            Appointment.appointment_date <= end,
        )
        .order_by(Appointment.appointment_date)
    )
    return list(result.scalars().all())


async def list_cancelled_appointments(session: AsyncSession, admin_id: int) -> list[CancelledAppointment]:
    result = await session.execute(
        select(CancelledAppointment)
        .where(CancelledAppointment.admin_id == admin_id)
        .order_by(CancelledAppointment.cancelled_at.desc())
    )
    return list(result.scalars().all())


async def list_cancelled_between(
    session: AsyncSession, admin_id: int, start: datetime, end: datetime
) -> list[CancelledAppointment]:
    result = await session.execute(
        select(CancelledAppointment)
        .where(
            CancelledAppointment.admin_id == admin_id,
            CancelledAppointment.appointment_date >= start,
            CancelledAppointment.appointment_date <= end,
        )
        .order_by(CancelledAppointment.appointment_date)
    )
    return list(result.scalars().all())


async def cancel_appointment(
    session: AsyncSession, appointment_id: int, admin_id: int
) -> CancelledAppointment:
    """Move the appointment into the cancelled history in one transaction.

    The row is read with a write lock so a concurrent cancel (or a rebook of
    the freed slot) cannot interleave. Reminders and the thank-you message are
    left untouched; the scheduler only joins active appointments.
    """
    try:
        appointment = await get_owned_appointment(session, appointment_id, admin_id, for_update=True)
        cancelled = CancelledAppointment(
            id=appointment.id,
            admin_id=appointment.admin_id,
            slug_id=appointment.slug_id,
            client_name=appointment.client_name,
            client_email=appointment.client_email,
            appointment_date=appointment.appointment_date,
            details=appointment.details,
            created_at=appointment.created_at,
            cancelled_at=utc_naive_now(),
        )
        session.add(cancelled)
        await session.delete(appointment)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    return cancelled
