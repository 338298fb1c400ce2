from datetime import datetime

from sqlalchemy import select

from app.models import Appointment, CancelledAppointment, Reminder, ThankYouMessage


def test_datetime_columns_are_naive():
    for model, column in (
        (Appointment, "appointment_date"),
        (Appointment, "created_at"),
        (CancelledAppointment, "cancelled_at"),
        (Reminder, "reminder_time"),
        (ThankYouMessage, "send_time"),
    ):
        assert model.__table__.c[column].type.timezone is False, f"{model.__name__}.{column}"


async def test_appointment_date_reads_back_as_naive_utc(signup, create_page, book, session_maker):
    alice = await signup("alice")
    await create_page(alice)

    resp = await book(alice, when="2025-06-01 10:00", tz="Asia/Kolkata")
    assert resp.status_code == 201

    async with session_maker() as session:
        stored = (
            await session.execute(select(Appointment).where(Appointment.id == resp.json()["appointment_id"]))
        ).scalar_one()
    assert stored.appointment_date.tzinfo is None
    assert stored.appointment_date == datetime(2025, 6, 1, 4, 30)
