from datetime import UTC, datetime
from enum import Enum

from sqlmodel import Field, SQLModel


def _utc_naive_now() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class ScheduledMessageBase(SQLModel):
    # No foreign key: rows outlive a cancelled appointment and are simply
    # never joined again by the scheduler.
    appointment_id: int = Field(index=True)
    message: str | None = None
    status: str = Field(default=MessageStatus.PENDING.value, index=True)
    created_at: datetime = Field(default_factory=_utc_naive_now)


class Reminder(ScheduledMessageBase, table=True):
    __tablename__ = "reminders"
    id: int | None = Field(default=None, primary_key=True)
    reminder_time: datetime = Field(index=True)


class ThankYouMessage(ScheduledMessageBase, table=True):
    __tablename__ = "thank_you_messages"
    id: int | None = Field(default=None, primary_key=True)
    appointment_id: int = Field(unique=True, index=True)
    send_time: datetime = Field(index=True)


class ReminderPublic(SQLModel):
    id: int
    appointment_id: int
    reminder_time: datetime
    message: str | None = None
    status: str


class ThankYouMessagePublic(SQLModel):
    id: int
    appointment_id: int
    send_time: datetime
    message: str | None = None
    status: str
