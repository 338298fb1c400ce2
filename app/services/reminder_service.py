from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidInput, NotFoundOrForbidden
from app.models.scheduled_message import Reminder
from app.services.appointment_service import get_owned_appointment
from app.services.slot_service import reminder_time_for

UNSET = object()


async def create_reminder(
    session: AsyncSession,
    appointment_id: int,
    admin_id: int,
    *,
    reminder_time: str | None,
    client_timezone: str | None = None,
    message: str | None = None,
) -> Reminder:
    if not reminder_time:
        raise InvalidInput("reminder_time is required.")
    appointment = await get_owned_appointment(session, appointment_id, admin_id)
    conv = reminder_time_for(reminder_time, client_timezone, appointment.appointment_date)
    if not conv.ok:
        raise InvalidInput(conv.error)
    reminder = Reminder(appointment_id=appointment.id, reminder_time=conv.value, message=message or None)
    session.add(reminder)
    await session.flush()
    await session.refresh(reminder)
    return reminder


async def list_reminders(session: AsyncSession, appointment_id: int, admin_id: int) -> list[Reminder]:
    await get_owned_appointment(session, appointment_id, admin_id)
    result = await session.execute(
        select(Reminder).where(Reminder.appointment_id == appointment_id).order_by(Reminder.reminder_time)
    )
    return list(result.scalars().all())


async def _get_reminder(session: AsyncSession, reminder_id: int, appointment_id: int) -> Reminder:
    result = await session.execute(
        select(Reminder).where(Reminder.id == reminder_id, Reminder.appointment_id == appointment_id)
    )
    reminder = result.scalar_one_or_none()
    if not reminder:
        raise NotFoundOrForbidden("Reminder not found for this appointment.")
    return reminder


async def update_reminder(
    session: AsyncSession,
    appointment_id: int,
    reminder_id: int,
    admin_id: int,
    *,
    reminder_time: str | None = None,
    client_timezone: str | None = None,
    message: str | None | object = UNSET,
) -> Reminder:
    """Change the time and/or message. ``message=None`` clears it; leave UNSET to keep it."""
    if not reminder_time and message is UNSET:
        raise InvalidInput("Either reminder_time or message must be provided for an update.")
    appointment = await get_owned_appointment(session, appointment_id, admin_id)
    reminder = await _get_reminder(session, reminder_id, appointment.id)
    if reminder_time:
        conv = reminder_time_for(reminder_time, client_timezone, appointment.appointment_date)
        if not conv.ok:
            raise InvalidInput(conv.error)
        reminder.reminder_time = conv.value
    if message is not UNSET:
        reminder.message = message
    session.add(reminder)
    await session.flush()
    return reminder


async def delete_reminder(session: AsyncSession, appointment_id: int, reminder_id: int, admin_id: int) -> None:
    await get_owned_appointment(session, appointment_id, admin_id)
    reminder = await _get_reminder(session, reminder_id, appointment_id)
    await session.delete(reminder)
    await session.flush()
