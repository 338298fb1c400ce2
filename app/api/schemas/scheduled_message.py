from pydantic import BaseModel


class ReminderCreateRequest(BaseModel):
    reminder_time: str | None = None
    client_timezone: str | None = None
    message: str | None = None


class ReminderUpdateRequest(BaseModel):
    # message may be sent as null to clear it; omit it to keep the current one
    reminder_time: str | None = None
    client_timezone: str | None = None
    message: str | None = None


class ThankYouUpdateRequest(BaseModel):
    send_time: str | None = None
    client_timezone: str | None = None
    message: str | None = None
