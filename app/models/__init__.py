from app.models.admin import Admin, AdminCreate, AdminPublic, AdminUpdate
from app.models.booking_page import (
    BookingPage,
    BookingPageDetail,
    BookingPageField,
    BookingPageFieldCreate,
    BookingPageFieldPublic,
    BookingPagePublic,
)
from app.models.appointment import (
    Appointment,
    AppointmentDetail,
    AppointmentFieldValue,
    AppointmentPublic,
    CancelledAppointment,
    CancelledAppointmentPublic,
)
from app.models.scheduled_message import (
    MessageStatus,
    Reminder,
    ReminderPublic,
    ThankYouMessage,
    ThankYouMessagePublic,
)

__all__ = [
    "Admin",
    "AdminCreate",
    "AdminPublic",
    "AdminUpdate",
    "BookingPage",
    "BookingPageDetail",
    "BookingPageField",
    "BookingPageFieldCreate",
    "BookingPageFieldPublic",
    "BookingPagePublic",
    "Appointment",
    "AppointmentDetail",
    "AppointmentFieldValue",
    "AppointmentPublic",
    "CancelledAppointment",
    "CancelledAppointmentPublic",
    "MessageStatus",
    "Reminder",
    "ReminderPublic",
    "ThankYouMessage",
    "ThankYouMessagePublic",
]
