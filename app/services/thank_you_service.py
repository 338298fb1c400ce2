from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import InvalidInput, NotFoundOrForbidden
from app.models.scheduled_message import ThankYouMessage
from app.services.appointment_service import get_owned_appointment
from app.services.reminder_service import UNSET
from app.services.slot_service import thank_you_time_for


async def _get_message(session: AsyncSession, appointment_id: int) -> ThankYouMessage:
    result = await session.execute(
        select(ThankYouMessage).where(ThankYouMessage.appointment_id == appointment_id)
    )
    message = result.scalar_one_or_none()
    if not message:
        raise NotFoundOrForbidden("Thank you message not found for this appointment.")
    return message


async def get_thank_you(session: AsyncSession, appointment_id: int, admin_id: int) -> ThankYouMessage:
    await get_owned_appointment(session, appointment_id, admin_id)
    return await _get_message(session, appointment_id)


async def update_thank_you(
    session: AsyncSession,
    appointment_id: int,
    admin_id: int,
    *,
    send_time: str | None = None,
    client_timezone: str | None = None,
    message: str | None | object = UNSET,
) -> ThankYouMessage:
    if not send_time and message is UNSET:
        raise InvalidInput("Either message or send_time must be provided for an update.")
    appointment = await get_owned_appointment(session, appointment_id, admin_id)
    thank_you = await _get_message(session, appointment.id)
    if send_time:
        conv = thank_you_time_for(send_time, client_timezone, appointment.appointment_date)
        if not conv.ok:
            raise InvalidInput(conv.error)
        thank_you.send_time = conv.value
    if message is not UNSET:
        thank_you.message = message
    session.add(thank_you)
    await session.flush()
    return thank_you


async def delete_thank_you(session: AsyncSession, appointment_id: int, admin_id: int) -> bool:
    """Returns False when there was nothing to delete (not an error)."""
    await get_owned_appointment(session, appointment_id, admin_id)
    result = await session.execute(
        delete(ThankYouMessage).where(ThankYouMessage.appointment_id == appointment_id)
    )
    await session.flush()
    return bool(result.rowcount)
