from datetime import UTC, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class BookingPage(SQLModel, table=True):
    """A public booking link ("slug") owned by one admin."""

    __tablename__ = "slugs"
    __table_args__ = (UniqueConstraint("admin_id", "slug", name="uq_slugs_admin_slug"),)
    id: int | None = Field(default=None, primary_key=True)
    admin_id: int = Field(foreign_key="admins.id", index=True, ondelete="CASCADE")
    slug: str
    created_at: datetime = Field(default_factory=_utc_naive_now)


class BookingPageFieldBase(SQLModel):
    field_name: str
    field_label: str
    field_type: str = "text"
    is_required: bool = False


class BookingPageField(BookingPageFieldBase, table=True):
    __tablename__ = "slug_fields"
    id: int | None = Field(default=None, primary_key=True)
    slug_id: int = Field(foreign_key="slugs.id", index=True, ondelete="CASCADE")
    position: int = 0


class BookingPageFieldCreate(BookingPageFieldBase):
    pass


class BookingPageFieldPublic(BookingPageFieldBase):
    id: int


class BookingPagePublic(SQLModel):
    id: int
    slug: str
    created_at: datetime


class BookingPageDetail(BookingPagePublic):
    fields: list[BookingPageFieldPublic] = []
