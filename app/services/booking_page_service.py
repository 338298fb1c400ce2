import re

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import Conflict, InvalidInput, NotFoundOrForbidden
from app.models.appointment import Appointment, AppointmentFieldValue, CancelledAppointment
from app.models.booking_page import BookingPage, BookingPageField, BookingPageFieldCreate

SLUG_RE = re.compile(r"^[a-z0-9-]+$")


def is_valid_slug(slug: str | None) -> bool:
    return bool(slug) and SLUG_RE.match(slug) is not None


def _validate(slug: str | None, fields: list[BookingPageFieldCreate]) -> None:
    if not is_valid_slug(slug):
        raise InvalidInput("Slug is required and can only contain lowercase letters, numbers, and hyphens.")
    names = [f.field_name for f in fields]
    if any(not n for n in names):
        raise InvalidInput("Every custom field needs a field_name.")
    if len(set(names)) != len(names):
        raise InvalidInput("Custom field names must be unique within a booking page.")


async def get_fields(session: AsyncSession, slug_id: int) -> list[BookingPageField]:
    result = await session.execute(
        select(BookingPageField)
        .where(BookingPageField.slug_id == slug_id)
        .order_by(BookingPageField.position, BookingPageField.id)
    )
    return list(result.scalars().all())


async def _get_owned_page(session: AsyncSession, slug_id: int, admin_id: int) -> BookingPage:
    result = await session.execute(
        select(BookingPage).where(BookingPage.id == slug_id, BookingPage.admin_id == admin_id)
    )
    page = result.scalar_one_or_none()
    if not page:
        raise NotFoundOrForbidden("Booking page not found.")
    return page


async def _slug_taken(session: AsyncSession, admin_id: int, slug: str, exclude_id: int | None = None) -> bool:
    q = select(BookingPage.id).where(BookingPage.admin_id == admin_id, BookingPage.slug == slug)
    if exclude_id is not None:
        q = q.where(BookingPage.id != exclude_id)
    result = await session.execute(q)
    return result.first() is not None


def _add_fields(session: AsyncSession, slug_id: int, fields: list[BookingPageFieldCreate]) -> None:
    for position, f in enumerate(fields):
        session.add(
            BookingPageField(
                slug_id=slug_id,
                field_name=f.field_name,
                field_label=f.field_label,
                field_type=f.field_type or "text",
                is_required=bool(f.is_required),
                position=position,
            )
        )


async def create_booking_page(
    session: AsyncSession, admin_id: int, slug: str | None, fields: list[BookingPageFieldCreate]
) -> BookingPage:
    _validate(slug, fields)
    if await _slug_taken(session, admin_id, slug):
        raise Conflict("You already have a booking page with this slug.")
    page = BookingPage(admin_id=admin_id, slug=slug)
    session.add(page)
    await session.flush()
    _add_fields(session, page.id, fields)
    await session.flush()
    await session.refresh(page)
    return page


async def list_booking_pages(session: AsyncSession, admin_id: int) -> list[BookingPage]:
    result = await session.execute(
        select(BookingPage).where(BookingPage.admin_id == admin_id).order_by(BookingPage.created_at, BookingPage.id)
    )
    return list(result.scalars().all())


async def get_booking_page(
    session: AsyncSession, slug_id: int, admin_id: int
) -> tuple[BookingPage, list[BookingPageField]]:
    page = await _get_owned_page(session, slug_id, admin_id)
    return page, await get_fields(session, page.id)


async def update_booking_page(
    session: AsyncSession,
    slug_id: int,
    admin_id: int,
    slug: str | None,
    fields: list[BookingPageFieldCreate],
) -> BookingPage:
    """Rename the page and replace all of its fields."""
    _validate(slug, fields)
    page = await _get_owned_page(session, slug_id, admin_id)
    if await _slug_taken(session, admin_id, slug, exclude_id=page.id):
        raise Conflict("You already have another booking page with this slug.")
    page.slug = slug
    session.add(page)

    old_ids = select(BookingPageField.id).where(BookingPageField.slug_id == page.id)
    # Stored answers keep their field_name snapshot
    await session.execute(
        update(AppointmentFieldValue)
        .where(AppointmentFieldValue.slug_field_id.in_(old_ids))
        .values(slug_field_id=None)
    )
    await session.execute(delete(BookingPageField).where(BookingPageField.slug_id == page.id))
    _add_fields(session, page.id, fields)
    await session.flush()
    return page


async def delete_booking_page(session: AsyncSession, slug_id: int, admin_id: int) -> None:
    page = await _get_owned_page(session, slug_id, admin_id)
    old_ids = select(BookingPageField.id).where(BookingPageField.slug_id == page.id)
    await session.execute(
        update(AppointmentFieldValue)
        .where(AppointmentFieldValue.slug_field_id.in_(old_ids))
        .values(slug_field_id=None)
    )
    await session.execute(
        update(Appointment).where(Appointment.slug_id == page.id).values(slug_id=None)
    )
    await session.execute(
        update(CancelledAppointment).where(CancelledAppointment.slug_id == page.id).values(slug_id=None)
    )
    await session.execute(delete(BookingPageField).where(BookingPageField.slug_id == page.id))
    await session.delete(page)
    await session.flush()
