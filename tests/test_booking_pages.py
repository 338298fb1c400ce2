from sqlalchemy import select

from app.models import Appointment, AppointmentFieldValue


async def test_create_list_and_get_page(signup, create_page, client):
    alice = await signup("alice")
    created = await create_page(
        alice,
        fields=[
            {"field_name": "company", "field_label": "Company", "is_required": True},
            {"field_name": "phone", "field_label": "Phone", "field_type": "tel"},
        ],
    )

    listing = await client.get("/api/slugs", headers=alice["headers"])
    detail = await client.get(f"/api/slugs/{created['slug_id']}", headers=alice["headers"])

    assert created["slug"] == "intro-call"
    assert [p["slug"] for p in listing.json()] == ["intro-call"]
    assert [f["field_name"] for f in detail.json()["fields"]] == ["company", "phone"]
    assert detail.json()["fields"][1]["field_type"] == "tel"


async def test_page_slug_rules(signup, create_page, client):
    alice = await signup("alice")
    bruno = await signup("bruno")
    await create_page(alice, slug="intro-call")

    duplicate = await client.post("/api/slugs", json={"slug": "intro-call"}, headers=alice["headers"])
    invalid = await client.post("/api/slugs", json={"slug": "Intro Call"}, headers=alice["headers"])
    repeated_fields = await client.post(
        "/api/slugs",
        json={
            "slug": "other",
            "fields": [{"field_name": "a", "field_label": "A"}, {"field_name": "a", "field_label": "A again"}],
        },
        headers=alice["headers"],
    )
    other_admin = await client.post("/api/slugs", json={"slug": "intro-call"}, headers=bruno["headers"])

    assert duplicate.status_code == 409
    assert invalid.status_code == 400
    assert repeated_fields.status_code == 400
    assert other_admin.status_code == 201


async def test_update_replaces_fields(signup, create_page, book, client, session_maker):
    alice = await signup("alice")
    page = await create_page(alice, fields=[{"field_name": "company", "field_label": "Company"}])
    appointment_id = (await book(alice, company="Acme")).json()["appointment_id"]

    resp = await client.put(
        f"/api/slugs/{page['slug_id']}",
        json={"slug": "discovery", "fields": [{"field_name": "budget", "field_label": "Budget"}]},
        headers=alice["headers"],
    )

    assert resp.status_code == 200
    form = await client.get("/api/public/alice/discovery/form")
    assert [f["field_name"] for f in form.json()["fields"]][2:] == ["budget"]
    assert (await client.get("/api/public/alice/intro-call/form")).status_code == 404
    async with session_maker() as session:
        value = (
            await session.execute(
                select(AppointmentFieldValue).where(AppointmentFieldValue.appointment_id == appointment_id)
            )
        ).scalar_one()
    assert value.field_name == "company"
    assert value.slug_field_id is None


async def test_update_to_taken_slug_conflicts(signup, create_page, client):
    alice = await signup("alice")
    await create_page(alice, slug="intro-call")
    second = await create_page(alice, slug="deep-dive")

    resp = await client.put(f"/api/slugs/{second['slug_id']}", json={"slug": "intro-call"}, headers=alice["headers"])

    assert resp.status_code == 409


async def test_delete_page_keeps_appointments(signup, create_page, book, client, session_maker):
    alice = await signup("alice")
    page = await create_page(alice, fields=[{"field_name": "company", "field_label": "Company"}])
    appointment_id = (await book(alice, company="Acme")).json()["appointment_id"]

    resp = await client.delete(f"/api/slugs/{page['slug_id']}", headers=alice["headers"])

    assert resp.status_code == 200
    assert (await client.get("/api/slugs", headers=alice["headers"])).json() == []
    async with session_maker() as session:
        appointment = await session.get(Appointment, appointment_id)
    assert appointment.slug_id is None
    detail = await client.get(f"/api/appointments/{appointment_id}", headers=alice["headers"])
    assert detail.json()["custom_fields"] == {"company": "Acme"}


async def test_pages_are_private_to_their_admin(signup, create_page, client):
    alice = await signup("alice")
    bruno = await signup("bruno")
    page = await create_page(alice)
    url = f"/api/slugs/{page['slug_id']}"

    assert (await client.get(url, headers=bruno["headers"])).status_code == 404
    assert (await client.put(url, json={"slug": "mine"}, headers=bruno["headers"])).status_code == 404
    assert (await client.delete(url, headers=bruno["headers"])).status_code == 404
    assert (await client.get("/api/slugs", headers=bruno["headers"])).json() == []
