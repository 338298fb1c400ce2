from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.api.schemas.auth import MessageResponse
from app.api.schemas.scheduled_message import ReminderCreateRequest, ReminderUpdateRequest
from app.core.db import get_session
from app.models.admin import Admin
from app.models.scheduled_message import Reminder, ReminderPublic
from app.services.reminder_service import (
    UNSET,
    create_reminder,
    delete_reminder,
    list_reminders,
    update_reminder,
)

router = APIRouter(prefix="/appointments/{appointment_id}/reminders", tags=["reminders"])


def _to_public(r: Reminder) -> ReminderPublic:
    return ReminderPublic(
        id=r.id,
        appointment_id=r.appointment_id,
        reminder_time=r.reminder_time,
        message=r.message,
        status=r.status,
    )


@router.post("", response_model=ReminderPublic, status_code=status.HTTP_201_CREATED)
async def add_reminder(
    appointment_id: int,
    body: ReminderCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> ReminderPublic:
    reminder = await create_reminder(
        session,
        appointment_id,
        current_admin.id,
        reminder_time=body.reminder_time,
        client_timezone=body.client_timezone,
        message=body.message,
    )
    return _to_public(reminder)


@router.get("", response_model=list[ReminderPublic])
async def get_reminders(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> list[ReminderPublic]:
    return [_to_public(r) for r in await list_reminders(session, appointment_id, current_admin.id)]


@router.put("/{reminder_id}", response_model=ReminderPublic)
async def edit_reminder(
    appointment_id: int,
    reminder_id: int,
    body: ReminderUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> ReminderPublic:
    reminder = await update_reminder(
        session,
        appointment_id,
        reminder_id,
        current_admin.id,
        reminder_time=body.reminder_time,
        client_timezone=body.client_timezone,
        message=body.message if "message" in body.model_fields_set else UNSET,
    )
    return _to_public(reminder)


@router.delete("/{reminder_id}", response_model=MessageResponse)
async def remove_reminder(
    appointment_id: int,
    reminder_id: int,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> MessageResponse:
    await delete_reminder(session, appointment_id, reminder_id, current_admin.id)
    return MessageResponse(message="Reminder deleted successfully.")
