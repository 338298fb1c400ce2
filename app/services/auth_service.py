import logging
from datetime import timedelta

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import InvalidInput, NotFoundOrForbidden, Unauthorized
from app.core.security import (
    create_access_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)
from app.models.admin import Admin, AdminCreate, AdminPublic, AdminUpdate
from app.models.appointment import Appointment, AppointmentFieldValue, CancelledAppointment
from app.models.booking_page import BookingPage, BookingPageField
from app.models.scheduled_message import Reminder, ThankYouMessage
from app.services.booking_page_service import is_valid_slug
from app.services.slot_service import utc_naive_now

logger = logging.getLogger(__name__)

INVALID_LINK_SLUG = "Unique link slug can only contain lowercase letters, numbers, and hyphens."


async def get_admin_by_email(session: AsyncSession, email: str) -> Admin | None:
    result = await session.execute(select(Admin).where(Admin.email == email))
    return result.scalar_one_or_none()


async def get_admin_by_id(session: AsyncSession, admin_id: int) -> Admin | None:
    result = await session.execute(select(Admin).where(Admin.id == admin_id))
    return result.scalar_one_or_none()


def admin_to_public(admin: Admin) -> AdminPublic:
    return AdminPublic(
        id=admin.id,
        name=admin.name,
        email=admin.email,
        notification_email=admin.notification_email,
        unique_link_slug=admin.unique_link_slug,
    )


async def signup_admin(session: AsyncSession, data: AdminCreate) -> tuple[Admin, str]:
    if not (data.name and data.email and data.password and data.notification_email and data.unique_link_slug):
        raise InvalidInput(
            "Please provide name, email, password, notification email, and a unique link slug."
        )
    if not is_valid_slug(data.unique_link_slug):
        raise InvalidInput(INVALID_LINK_SLUG)
    result = await session.execute(
        select(Admin.id).where(or_(Admin.email == data.email, Admin.unique_link_slug == data.unique_link_slug))
    )
    if result.first() is not None:
        raise InvalidInput("An admin with this email or link slug already exists.")
    admin = Admin(
        name=data.name,
        email=data.email,
        hashed_password=hash_password(data.password),
        notification_email=data.notification_email,
        unique_link_slug=data.unique_link_slug,
    )
    session.add(admin)
    await session.flush()
    await session.refresh(admin)
    logger.info("Registered admin %s (%s)", admin.id, admin.unique_link_slug)
    return admin, create_access_token(admin.id)


async def login_admin(session: AsyncSession, email: str, password: str) -> tuple[Admin, str]:
    admin = await get_admin_by_email(session, email)
    if not admin or not verify_password(password, admin.hashed_password):
        raise Unauthorized("Invalid credentials.")
    return admin, create_access_token(admin.id)


async def update_profile(session: AsyncSession, admin: Admin, data: AdminUpdate) -> Admin:
    if data.unique_link_slug is not None and data.unique_link_slug != admin.unique_link_slug:
        if not is_valid_slug(data.unique_link_slug):
            raise InvalidInput(INVALID_LINK_SLUG)
        result = await session.execute(
            select(Admin.id).where(Admin.unique_link_slug == data.unique_link_slug, Admin.id != admin.id)
        )
        if result.first() is not None:
            raise InvalidInput("An admin with this link slug already exists.")
        admin.unique_link_slug = data.unique_link_slug
    if data.name:
        admin.name = data.name
    if data.notification_email:
        admin.notification_email = data.notification_email
    session.add(admin)
    await session.flush()
    return admin


async def change_password(session: AsyncSession, admin: Admin, current_password: str, new_password: str) -> None:
    if not current_password or not new_password:
        raise InvalidInput("Current and new password are required.")
    if not verify_password(current_password, admin.hashed_password):
        raise Unauthorized("Invalid password.")
    admin.hashed_password = hash_password(new_password)
    session.add(admin)
    await session.flush()


async def request_password_reset(session: AsyncSession, email: str) -> str | None:
    """Store a reset token for ``email``; returns the raw token, or None if unknown.

    Callers must answer the same way in both cases.
    """
    admin = await get_admin_by_email(session, email)
    if not admin:
        return None
    raw, hashed = generate_reset_token()
    admin.password_reset_token = hashed
    admin.password_reset_expires = utc_naive_now() + timedelta(minutes=settings.password_reset_expire_minutes)
    session.add(admin)
    await session.flush()
    return raw


async def reset_password(session: AsyncSession, token: str, new_password: str) -> None:
    if not new_password:
        raise InvalidInput("Please provide a new password.")
    result = await session.execute(
        select(Admin).where(
            Admin.password_reset_token == hash_reset_token(token),
            Admin.password_reset_expires > utc_naive_now(),
        )
    )
    admin = result.scalar_one_or_none()
    if not admin:
        raise InvalidInput("Password reset token is invalid or has expired.")
    admin.hashed_password = hash_password(new_password)
    admin.password_reset_token = None
    admin.password_reset_expires = None
    session.add(admin)
    await session.flush()


async def delete_account(session: AsyncSession, admin_id: int, password: str | None) -> None:
    """Delete the admin and everything it owns, after checking the password."""
    if not password:
        raise InvalidInput("Password is required to delete your account.")
    admin = await get_admin_by_id(session, admin_id)
    if not admin:
        raise NotFoundOrForbidden("Admin not found.")
    if not verify_password(password, admin.hashed_password):
        raise Unauthorized("Invalid password. Account not deleted.")

    appointment_ids = select(Appointment.id).where(Appointment.admin_id == admin_id)
    cancelled_ids = select(CancelledAppointment.id).where(CancelledAppointment.admin_id == admin_id)
    page_ids = select(BookingPage.id).where(BookingPage.admin_id == admin_id)
    for owned_ids in (appointment_ids, cancelled_ids):
        await session.execute(delete(Reminder).where(Reminder.appointment_id.in_(owned_ids)))
        await session.execute(delete(ThankYouMessage).where(ThankYouMessage.appointment_id.in_(owned_ids)))
        await session.execute(
            delete(AppointmentFieldValue).where(AppointmentFieldValue.appointment_id.in_(owned_ids))
        )
    await session.execute(delete(Appointment).where(Appointment.admin_id == admin_id))
    await session.execute(delete(CancelledAppointment).where(CancelledAppointment.admin_id == admin_id))
    await session.execute(delete(BookingPageField).where(BookingPageField.slug_id.in_(page_ids)))
    await session.execute(delete(BookingPage).where(BookingPage.admin_id == admin_id))
    await session.delete(admin)
    await session.flush()
    logger.info("Deleted admin %s and all owned data", admin_id)
