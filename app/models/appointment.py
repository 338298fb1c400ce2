from datetime import UTC, datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    """Naive UTC for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


class AppointmentBase(SQLModel):
    admin_id: int = Field(foreign_key="admins.id", index=True, ondelete="CASCADE")
    slug_id: int | None = Field(default=None, foreign_key="slugs.id", index=True, ondelete="SET NULL")
    client_name: str
    client_email: str
    appointment_date: datetime = Field(index=True)
    details: str | None = None


class Appointment(AppointmentBase, table=True):
    __tablename__ = "appointments"
    # One active appointment per admin per instant, across all of the admin's pages.
    # Ids must never be reused since cancelled records keep them.
    __table_args__ = (
        UniqueConstraint("admin_id", "appointment_date", name="uq_appointments_admin_slot"),
        {"sqlite_autoincrement": True},
    )
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)


class AppointmentFieldValue(SQLModel, table=True):
    """Answer to a custom booking-page field.

    Not a foreign key to appointments: values stay readable through the
    cancelled record, which keeps the original appointment id.
    """

    __tablename__ = "appointment_custom_data"
    id: int | None = Field(default=None, primary_key=True)
    appointment_id: int = Field(index=True)
    slug_field_id: int | None = Field(default=None, foreign_key="slug_fields.id", ondelete="SET NULL")
    field_name: str
    field_value: str


class CancelledAppointment(AppointmentBase, table=True):
    __tablename__ = "cancelled_appointments"
    id: int = Field(primary_key=True)
    created_at: datetime
    cancelled_at: datetime = Field(default_factory=_utc_naive_now, index=True)


class AppointmentPublic(SQLModel):
    id: int
    admin_id: int
    slug_id: int | None = None
    client_name: str
    client_email: str
    appointment_date: datetime
    details: str | None = None
    created_at: datetime


class AppointmentDetail(AppointmentPublic):
    custom_fields: dict[str, str] = {}


class CancelledAppointmentPublic(AppointmentPublic):
    cancelled_at: datetime
