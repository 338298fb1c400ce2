from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_admin
from app.api.schemas.auth import MessageResponse
from app.api.schemas.booking_page import BookingPageCreated, BookingPageRequest
from app.core.db import get_session
from app.models.admin import Admin
from app.models.booking_page import BookingPageDetail, BookingPageFieldPublic, BookingPagePublic
from app.services.booking_page_service import (
    create_booking_page,
    delete_booking_page,
    get_booking_page,
    list_booking_pages,
    update_booking_page,
)

router = APIRouter(prefix="/slugs", tags=["booking pages"])


@router.post("", response_model=BookingPageCreated, status_code=status.HTTP_201_CREATED)
async def create_page(
    body: BookingPageRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> BookingPageCreated:
    page = await create_booking_page(session, current_admin.id, body.slug, body.fields)
    return BookingPageCreated(message="Booking page created successfully.", slug_id=page.id, slug=page.slug)


@router.get("", response_model=list[BookingPagePublic])
async def list_pages(
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> list[BookingPagePublic]:
    pages = await list_booking_pages(session, current_admin.id)
    return [BookingPagePublic(id=p.id, slug=p.slug, created_at=p.created_at) for p in pages]


@router.get("/{slug_id}", response_model=BookingPageDetail)
async def get_page(
    slug_id: int,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> BookingPageDetail:
    page, fields = await get_booking_page(session, slug_id, current_admin.id)
    return BookingPageDetail(
        id=page.id,
        slug=page.slug,
        created_at=page.created_at,
        fields=[
            BookingPageFieldPublic(
                id=f.id,
                field_name=f.field_name,
                field_label=f.field_label,
                field_type=f.field_type,
                is_required=f.is_required,
            )
            for f in fields
        ],
    )


@router.put("/{slug_id}", response_model=MessageResponse)
async def update_page(
    slug_id: int,
    body: BookingPageRequest,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> MessageResponse:
    await update_booking_page(session, slug_id, current_admin.id, body.slug, body.fields)
    return MessageResponse(message="Booking page updated successfully.")


@router.delete("/{slug_id}", response_model=MessageResponse)
async def delete_page(
    slug_id: int,
    session: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
) -> MessageResponse:
    await delete_booking_page(session, slug_id, current_admin.id)
    return MessageResponse(message="Booking page deleted successfully.")
