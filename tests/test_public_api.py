async def test_form_lists_compulsory_then_custom_fields(signup, create_page, client):
    alice = await signup("alice")
    await create_page(
        alice,
        fields=[
            {"field_name": "company", "field_label": "Company", "is_required": True},
            {"field_name": "topic", "field_label": "Topic", "field_type": "textarea"},
        ],
    )

    resp = await client.get("/api/public/alice/intro-call/form")

    assert resp.status_code == 200
    body = resp.json()
    assert body["slug"] == "intro-call"
    assert [f["field_name"] for f in body["fields"]] == ["client_name", "client_email", "company", "topic"]
    assert body["fields"][1]["field_type"] == "email"
    assert body["fields"][2]["is_required"] is True
    assert body["fields"][3]["field_type"] == "textarea"


async def test_form_for_unknown_link(client):
    resp = await client.get("/api/public/nobody/nothing/form")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "This booking link is not valid."


async def test_booked_slots_cover_every_page_of_the_admin(signup, create_page, book, client):
    alice = await signup("alice")
    await create_page(alice, slug="intro-call")
    await create_page(alice, slug="deep-dive")
    await book(alice, page_slug="deep-dive", when="2025-06-01 10:00", tz="Europe/London")
    await book(alice, page_slug="intro-call", when="2025-06-01 08:00", tz="UTC")

    resp = await client.get("/api/public/alice/intro-call/booked-slots")

    assert resp.status_code == 200
    assert resp.json() == {
        "timezone": "UTC",
        "bookedSlots": ["2025-06-01 08:00:00", "2025-06-01 09:00:00"],
    }


async def test_booked_slots_exclude_other_admins(signup, create_page, book, client):
    alice = await signup("alice")
    bruno = await signup("bruno")
    await create_page(alice)
    await create_page(bruno)
    await book(bruno)

    resp = await client.get("/api/public/alice/intro-call/booked-slots")

    assert resp.json()["bookedSlots"] == []


async def test_health(client):
    resp = await client.get("/health")
    assert resp.json() == {"status": "ok"}
