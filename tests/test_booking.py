import asyncio

import pytest
from sqlalchemy import select

from app.models import Appointment, AppointmentFieldValue, ThankYouMessage
from app.services import booking_service, email_service
from app.services.booking_service import book_appointment, resolve_page


async def test_booking_stores_utc_and_emails_both_parties(signup, create_page, book, outbox):
    alice = await signup("alice")
    await create_page(alice)

    resp = await book(alice, when="2025-03-10 14:00", tz="America/New_York")

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["message"] == "Appointment created successfully!"
    assert body["appointment_date"] == "2025-03-10T18:00:00"
    recipients = sorted(m["to"] for m in outbox)
    assert recipients == ["alice-notify@example.com", "bob@example.com"]


async def test_same_instant_twice_is_rejected(signup, create_page, book):
    alice = await signup("alice")
    await create_page(alice)

    first = await book(alice)
    second = await book(alice, client_name="Carol", client_email="carol@example.com")

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.json()["detail"] == "This time slot is already booked for this provider."


async def test_same_instant_in_another_zone_is_rejected(signup, create_page, book):
    alice = await signup("alice")
    await create_page(alice)

    assert (await book(alice, when="2025-06-01 10:00", tz="Europe/London")).status_code == 201
    # 05:00 in New York is the same 09:00 UTC
    resp = await book(alice, when="2025-06-01 05:00", tz="America/New_York")
    assert resp.status_code == 409


async def test_conflict_spans_all_pages_of_an_admin(signup, create_page, book):
    alice = await signup("alice")
    await create_page(alice, slug="intro-call")
    await create_page(alice, slug="deep-dive")

    assert (await book(alice, page_slug="intro-call", when="2025-05-10 10:00")).status_code == 201
    resp = await book(alice, page_slug="deep-dive", when="2025-05-10 10:00")
    assert resp.status_code == 409


async def test_different_admins_can_share_an_instant(signup, create_page, book):
    alice = await signup("alice")
    bruno = await signup("bruno")
    await create_page(alice)
    await create_page(bruno)

    assert (await book(alice)).status_code == 201
    assert (await book(bruno)).status_code == 201


async def test_concurrent_bookings_for_one_slot_yield_one_winner(signup, create_page, book, session_maker):
    alice = await signup("alice")
    await create_page(alice)

    responses = await asyncio.gather(
        *(book(alice, client_email=f"client{i}@example.com") for i in range(5))
    )

    codes = sorted(r.status_code for r in responses)
    assert codes == [201, 409, 409, 409, 409]
    async with session_maker() as session:
        result = await session.execute(select(ThankYouMessage))
        assert len(result.scalars().all()) == 1


async def test_missing_required_input(signup, create_page, client):
    alice = await signup("alice")
    await create_page(alice)

    resp = await client.post(
        "/api/public/alice/intro-call/book",
        json={"client_email": "bob@example.com", "appointment_date": "2025-06-01 10:00"},
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Name, email, and date are required."


async def test_invalid_timezone_or_date(signup, create_page, book):
    alice = await signup("alice")
    await create_page(alice)

    bad_zone = await book(alice, tz="Nowhere/Special")
    bad_date = await book(alice, when="tomorrow at ten")

    assert bad_zone.status_code == 400
    assert bad_zone.json()["detail"] == "Invalid timezone or date format provided."
    assert bad_date.status_code == 400


async def test_unknown_link_is_not_found(signup, create_page, book, client):
    alice = await signup("alice")
    await create_page(alice)

    wrong_page = await book(alice, page_slug="nope")
    wrong_admin = await client.post(
        "/api/public/nobody/intro-call/book",
        json={"client_name": "Bob", "client_email": "bob@example.com", "appointment_date": "2025-06-01 10:00"},
    )

    assert wrong_page.status_code == 404
    assert wrong_page.json()["detail"] == "This booking link is not valid."
    assert wrong_admin.status_code == 404


async def test_custom_fields_are_matched_by_name(signup, create_page, book, client, session_maker):
    alice = await signup("alice")
    await create_page(
        alice,
        fields=[
            {"field_name": "company", "field_label": "Company", "is_required": True},
            {"field_name": "phone", "field_label": "Phone"},
        ],
    )

    resp = await book(alice, company="Acme", phone="", favourite_colour="blue")
    assert resp.status_code == 201
    appointment_id = resp.json()["appointment_id"]

    async with session_maker() as session:
        result = await session.execute(
            select(AppointmentFieldValue).where(AppointmentFieldValue.appointment_id == appointment_id)
        )
        values = result.scalars().all()
    assert [(v.field_name, v.field_value) for v in values] == [("company", "Acme")]

    detail = await client.get(f"/api/appointments/{appointment_id}", headers=alice["headers"])
    assert detail.json()["custom_fields"] == {"company": "Acme"}


async def test_non_string_custom_values_are_stored_as_text(signup, create_page, book, client):
    alice = await signup("alice")
    await create_page(alice, fields=[{"field_name": "attendees", "field_label": "Attendees"}])

    resp = await book(alice, attendees=3)

    detail = await client.get(f"/api/appointments/{resp.json()['appointment_id']}", headers=alice["headers"])
    assert detail.json()["custom_fields"] == {"attendees": "3"}


async def test_custom_answers_appear_in_admin_email(signup, create_page, book, outbox):
    alice = await signup("alice")
    await create_page(alice, fields=[{"field_name": "company", "field_label": "Company Name"}])

    await book(alice, company="Acme")

    admin_mail = next(m for m in outbox if m["to"] == "alice-notify@example.com")
    assert "Company Name" in admin_mail["html"]
    assert "Acme" in admin_mail["html"]


async def test_booking_schedules_thank_you_a_day_later(signup, create_page, book, client):
    alice = await signup("alice")
    await create_page(alice)

    resp = await book(alice, when="2025-06-01 10:00")
    thank_you = await client.get(
        f"/api/appointments/{resp.json()['appointment_id']}/thank-you", headers=alice["headers"]
    )

    assert thank_you.status_code == 200
    assert thank_you.json()["send_time"] == "2025-06-02T10:00:00"
    assert thank_you.json()["status"] == "pending"
    assert thank_you.json()["message"] is None


async def test_zone_directory_name_is_rejected(signup, create_page, book):
    alice = await signup("alice")
    await create_page(alice)

    resp = await book(alice, tz="America")

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Invalid timezone or date format provided."


async def test_out_of_range_dates_are_rejected(signup, create_page, book, client):
    alice = await signup("alice")
    await create_page(alice)

    overflow_on_conversion = await book(alice, when="9999-12-31 23:00", tz="America/Los_Angeles")
    # Valid instant, but the follow-up a day later does not fit
    overflow_on_thank_you = await book(alice, when="9999-12-31 10:00", tz="UTC")

    assert overflow_on_conversion.status_code == 400
    assert overflow_on_thank_you.status_code == 400
    assert (await client.get("/api/appointments", headers=alice["headers"])).json() == []


async def test_failure_before_commit_leaves_nothing_behind(signup, create_page, session_maker, monkeypatch):
    alice = await signup("alice")
    await create_page(alice, fields=[{"field_name": "company", "field_label": "Company"}])

    def _broken_thank_you(**kwargs):
        raise RuntimeError("thank-you insert failed")

    monkeypatch.setattr(booking_service, "ThankYouMessage", _broken_thank_you)

    async with session_maker() as session:
        page = await resolve_page(session, "alice", "intro-call")
        with pytest.raises(RuntimeError):
            await book_appointment(
                session,
                page,
                client_name="Bob",
                client_email="bob@example.com",
                appointment_date="2025-06-01 10:00",
                custom_fields={"company": "Acme"},
            )

    async with session_maker() as session:
        assert (await session.execute(select(Appointment))).scalars().all() == []
        assert (await session.execute(select(AppointmentFieldValue))).scalars().all() == []
        assert (await session.execute(select(ThankYouMessage))).scalars().all() == []


async def test_booking_succeeds_when_email_fails(signup, create_page, book, client, monkeypatch):
    alice = await signup("alice")
    await create_page(alice)

    def _smtp_down(to_email, subject, html_body):
        raise ConnectionError("smtp down")

    monkeypatch.setattr(email_service, "_send_email_sync", _smtp_down)

    resp = await book(alice)

    assert resp.status_code == 201
    detail = await client.get(f"/api/appointments/{resp.json()['appointment_id']}", headers=alice["headers"])
    assert detail.status_code == 200


async def test_admin_is_notified_when_client_email_fails(signup, create_page, book, monkeypatch):
    alice = await signup("alice")
    await create_page(alice)
    delivered = []

    def _send(to_email, subject, html_body):
        if to_email == "bob@example.com":
            raise ConnectionError("mailbox unavailable")
        delivered.append(to_email)
        return True

    monkeypatch.setattr(email_service, "_send_email_sync", _send)

    resp = await book(alice)

    assert resp.status_code == 201
    assert delivered == ["alice-notify@example.com"]
