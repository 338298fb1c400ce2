from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.api.schemas.auth import MessageResponse
from app.api.schemas.scheduled_message import ThankYouUpdateRequest
from app.core.db import get_session
from app.models.admin import Admin
from app.models.scheduled_message import ThankYouMessage, ThankYouMessagePublic
from app.services.reminder_service import UNSET
from app.services.thank_you_service import delete_thank_you, get_thank_you, update_thank_you

router = APIRouter(prefix="/appointments/{appointment_id}/thank-you", tags=["thank-you"])


def _to_public(t: ThankYouMessage) -> ThankYouMessagePublic:
    return ThankYouMessagePublic(
        id=t.id,
        appointment_id=t.appointment_id,
        send_time=t.send_time,
        message=t.message,
        status=t.status,
    )


@router.get("", response_model=ThankYouMessagePublic)
async def read_thank_you(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> ThankYouMessagePublic:
    return _to_public(await get_thank_you(session, appointment_id, current_admin.id))


@router.put("", response_model=ThankYouMessagePublic)
async def edit_thank_you(
    appointment_id: int,
    body: ThankYouUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> ThankYouMessagePublic:
    thank_you = await update_thank_you(
        session,
        appointment_id,
        current_admin.id,
        send_time=body.send_time,
        client_timezone=body.client_timezone,
        message=body.message if "message" in body.model_fields_set else UNSET,
    )
    return _to_public(thank_you)


@router.delete("", response_model=MessageResponse)
async def remove_thank_you(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> MessageResponse:
    if await delete_thank_you(session, appointment_id, current_admin.id):
        return MessageResponse(message="Thank you message has been successfully deleted and will not be sent.")
    return MessageResponse(message="No thank you message was found to delete.")
