import pytest


@pytest.fixture
async def appointment(signup, create_page, book):
    alice = await signup("alice")
    await create_page(alice)
    resp = await book(alice, when="2025-06-01 10:00")
    return alice, resp.json()["appointment_id"]


async def test_create_and_list_reminders(appointment, client):
    alice, appointment_id = appointment
    url = f"/api/appointments/{appointment_id}/reminders"

    created = await client.post(
        url,
        json={"reminder_time": "2025-06-01 05:00", "client_timezone": "America/New_York", "message": "See you soon"},
        headers=alice["headers"],
    )
    await client.post(url, json={"reminder_time": "2025-05-31 10:00"}, headers=alice["headers"])

    assert created.status_code == 201, created.text
    assert created.json()["reminder_time"] == "2025-06-01T09:00:00"
    assert created.json()["status"] == "pending"
    listing = await client.get(url, headers=alice["headers"])
    assert [r["reminder_time"] for r in listing.json()] == ["2025-05-31T10:00:00", "2025-06-01T09:00:00"]


@pytest.mark.parametrize("when", ["2025-06-01 10:00", "2025-06-01 11:00"])
async def test_reminder_not_before_appointment_is_rejected(appointment, client, when):
    alice, appointment_id = appointment

    resp = await client.post(
        f"/api/appointments/{appointment_id}/reminders",
        json={"reminder_time": when},
        headers=alice["headers"],
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Reminder time must be set before the appointment time."


async def test_reminder_requires_time(appointment, client):
    alice, appointment_id = appointment
    resp = await client.post(
        f"/api/appointments/{appointment_id}/reminders", json={"message": "hi"}, headers=alice["headers"]
    )
    assert resp.status_code == 400


async def test_reminders_of_foreign_appointment(appointment, signup, client):
    _, appointment_id = appointment
    bruno = await signup("bruno")
    url = f"/api/appointments/{appointment_id}/reminders"

    created = await client.post(url, json={"reminder_time": "2025-05-31 10:00"}, headers=bruno["headers"])
    listing = await client.get(url, headers=bruno["headers"])

    assert created.status_code == 404
    assert listing.status_code == 404


async def test_update_reminder(appointment, client):
    alice, appointment_id = appointment
    url = f"/api/appointments/{appointment_id}/reminders"
    reminder = (
        await client.post(url, json={"reminder_time": "2025-05-31 10:00", "message": "Bring notes"}, headers=alice["headers"])
    ).json()

    retimed = await client.put(f"{url}/{reminder['id']}", json={"reminder_time": "2025-06-01 08:00"}, headers=alice["headers"])
    assert retimed.json()["reminder_time"] == "2025-06-01T08:00:00"
    assert retimed.json()["message"] == "Bring notes"

    cleared = await client.put(f"{url}/{reminder['id']}", json={"message": None}, headers=alice["headers"])
    assert cleared.json()["message"] is None
    assert cleared.json()["reminder_time"] == "2025-06-01T08:00:00"

    too_late = await client.put(f"{url}/{reminder['id']}", json={"reminder_time": "2025-06-01 12:00"}, headers=alice["headers"])
    assert too_late.status_code == 400

    empty = await client.put(f"{url}/{reminder['id']}", json={}, headers=alice["headers"])
    assert empty.status_code == 400


async def test_delete_reminder(appointment, client):
    alice, appointment_id = appointment
    url = f"/api/appointments/{appointment_id}/reminders"
    reminder = (await client.post(url, json={"reminder_time": "2025-05-31 10:00"}, headers=alice["headers"])).json()

    deleted = await client.delete(f"{url}/{reminder['id']}", headers=alice["headers"])
    again = await client.delete(f"{url}/{reminder['id']}", headers=alice["headers"])

    assert deleted.status_code == 200
    assert again.status_code == 404
    assert (await client.get(url, headers=alice["headers"])).json() == []
