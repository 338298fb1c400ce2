from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.appointment import AppointmentPublic


class FormField(BaseModel):
    field_name: str
    field_label: str
    field_type: str = "text"
    is_required: bool = False


class BookingFormResponse(BaseModel):
    slug: str
    fields: list[FormField]


class BookedSlotsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timezone: str
    booked_slots: list[str] = Field(serialization_alias="bookedSlots")


class PublicBookingRequest(BaseModel):
    """Client booking. Any extra key is treated as a custom field answer."""

    model_config = ConfigDict(extra="allow")

    client_name: str | None = None
    client_email: str | None = None
    appointment_date: str | None = None  # local time, e.g. "2025-06-01 10:00"
    client_timezone: str | None = None
    details: str | None = None


class PublicBookingResponse(BaseModel):
    message: str
    appointment_id: int
    appointment_date: datetime  # UTC


class AdminBookingRequest(BaseModel):
    client_name: str | None = None
    client_email: str | None = None
    appointment_date: str | None = None
    client_timezone: str | None = None
    details: str | None = None
    thank_you_message: str | None = Field(default=None, alias="thankYouMessage")

    model_config = ConfigDict(populate_by_name=True)


class AdminBookingResponse(BaseModel):
    message: str
    appointment: AppointmentPublic


class CancelAppointmentRequest(BaseModel):
    cancellation_message: str | None = Field(default=None, alias="cancellationMessage")

    model_config = ConfigDict(populate_by_name=True)
