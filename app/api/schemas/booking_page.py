from pydantic import BaseModel

from app.models.booking_page import BookingPageFieldCreate


class BookingPageRequest(BaseModel):
    slug: str | None = None
    fields: list[BookingPageFieldCreate] = []


class BookingPageCreated(BaseModel):
    message: str
    slug_id: int
    slug: str
