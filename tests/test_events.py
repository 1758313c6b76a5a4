from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient


def iso(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


async def create_event(client: AsyncClient, headers: dict, payload: dict) -> dict:
    response = await client.post("/api/events", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["event"]


@pytest.mark.asyncio
async def test_create_event(client: AsyncClient, test_user, auth_headers, event_payload):
    response = await client.post("/api/events", json=event_payload(capacity=50), headers=auth_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Event created successfully"
    event = data["event"]
    assert event["organizer"]["id"] == str(test_user.id)
    assert event["capacity"] == 50
    assert event["status"] == "published"
    assert event["attendee_count"] == 0


@pytest.mark.asyncio
async def test_create_event_end_before_start(client: AsyncClient, auth_headers, event_payload):
    payload = event_payload(date={"start": iso(timedelta(days=5)), "end": iso(timedelta(days=4))})

    response = await client.post("/api/events", json=payload, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "End date must be after start date"


@pytest.mark.asyncio
async def test_create_event_missing_fields(client: AsyncClient, auth_headers):
    response = await client.post("/api/events", json={"title": "No details"}, headers=auth_headers)

    assert response.status_code == 400
    fields = {err["field"] for err in response.json()["errors"]}
    assert {"description", "type", "date", "location"} <= fields


@pytest.mark.asyncio
async def test_create_event_requires_auth(client: AsyncClient, event_payload):
    response = await client.post("/api/events", json=event_payload())

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_list_events(client: AsyncClient, auth_headers, event_payload):
    await create_event(client, auth_headers, event_payload(title="Later", date={
        "start": iso(timedelta(days=20)), "end": iso(timedelta(days=21))
    }))
    await create_event(client, auth_headers, event_payload(title="Sooner", type="webinar"))
    await create_event(client, auth_headers, event_payload(title="Hidden", is_public=False))
    await create_event(client, auth_headers, event_payload(title="Draft", status="draft"))

    response = await client.get("/api/events")
    assert response.status_code == 200
    data = response.json()
    assert [e["title"] for e in data["items"]] == ["Sooner", "Later"]
    assert data["pagination"]["total"] == 2

    webinars = await client.get("/api/events", params={"type": "webinar"})
    assert [e["title"] for e in webinars.json()["items"]] == ["Sooner"]

    drafts = await client.get("/api/events", params={"status": "draft"})
    assert [e["title"] for e in drafts.json()["items"]] == ["Draft"]


@pytest.mark.asyncio
async def test_list_events_invalid_type(client: AsyncClient):
    response = await client.get("/api/events", params={"type": "party"})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "type"


@pytest.mark.asyncio
async def test_private_event_requires_admin(
    client: AsyncClient, auth_headers, admin_auth_headers, event_payload
):
    event = await create_event(client, auth_headers, event_payload(is_public=False))

    anonymous = await client.get(f"/api/events/{event['id']}")
    admin = await client.get(f"/api/events/{event['id']}", headers=admin_auth_headers)

    assert anonymous.status_code == 403
    assert admin.status_code == 200


@pytest.mark.asyncio
async def test_rsvp_and_duplicate(client: AsyncClient, auth_headers, other_auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload())

    first = await client.post(f"/api/events/{event['id']}/rsvp", headers=other_auth_headers)
    assert first.status_code == 200
    assert first.json()["attendee_count"] == 1

    second = await client.post(f"/api/events/{event['id']}/rsvp", headers=other_auth_headers)
    assert second.status_code == 400
    assert second.json()["detail"] == "Already registered for this event"

    detail = await client.get(f"/api/events/{event['id']}")
    assert len(detail.json()["attendees"]) == 1


@pytest.mark.asyncio
async def test_rsvp_event_full(
    client: AsyncClient, auth_headers, other_auth_headers, moderator_auth_headers, event_payload
):
    event = await create_event(client, auth_headers, event_payload(capacity=1))

    await client.post(f"/api/events/{event['id']}/rsvp", headers=other_auth_headers)
    response = await client.post(f"/api/events/{event['id']}/rsvp", headers=moderator_auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Event is full"


@pytest.mark.asyncio
async def test_rsvp_unpublished_event(client: AsyncClient, auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload(status="draft"))

    response = await client.post(f"/api/events/{event['id']}/rsvp", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot RSVP to unpublished event"


@pytest.mark.asyncio
async def test_rsvp_deadline_passed(client: AsyncClient, auth_headers, event_payload):
    payload = event_payload(registration={"is_required": True, "deadline": iso(timedelta(days=-1))})
    event = await create_event(client, auth_headers, payload)

    response = await client.post(f"/api/events/{event['id']}/rsvp", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Registration deadline has passed"


@pytest.mark.asyncio
async def test_cancel_rsvp(client: AsyncClient, auth_headers, other_auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload())

    not_registered = await client.delete(f"/api/events/{event['id']}/rsvp", headers=other_auth_headers)
    assert not_registered.status_code == 400
    assert not_registered.json()["detail"] == "Not registered for this event"

    await client.post(f"/api/events/{event['id']}/rsvp", headers=other_auth_headers)
    cancelled = await client.delete(f"/api/events/{event['id']}/rsvp", headers=other_auth_headers)
    assert cancelled.status_code == 200
    assert cancelled.json()["attendee_count"] == 0


@pytest.mark.asyncio
async def test_update_event_partial(client: AsyncClient, auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload())

    response = await client.put(
        f"/api/events/{event['id']}",
        json={"title": "Renamed", "location": {"venue": "Annex"}},
        headers=auth_headers,
    )

    assert response.status_code == 200
    updated = response.json()["event"]
    assert updated["title"] == "Renamed"
    assert updated["location"]["venue"] == "Annex"
    assert updated["location"]["city"] == "Mogadishu"
    assert updated["description"] == event["description"]


@pytest.mark.asyncio
async def test_update_event_merged_dates(client: AsyncClient, auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload())

    response = await client.put(
        f"/api/events/{event['id']}",
        json={"date": {"end": iso(timedelta(days=1))}},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "End date must be after start date"


@pytest.mark.asyncio
async def test_non_owner_cannot_update_or_delete(
    client: AsyncClient, auth_headers, other_auth_headers, event_payload
):
    event = await create_event(client, auth_headers, event_payload())

    # Ownership is checked before the body is validated
    update = await client.put(
        f"/api/events/{event['id']}", json={"capacity": -5}, headers=other_auth_headers
    )
    delete = await client.delete(f"/api/events/{event['id']}", headers=other_auth_headers)

    assert update.status_code == 403
    assert delete.status_code == 403


@pytest.mark.asyncio
async def test_admin_can_delete_any_event(client: AsyncClient, auth_headers, admin_auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload())
    await client.post(f"/api/events/{event['id']}/rsvp", headers=auth_headers)

    response = await client.delete(f"/api/events/{event['id']}", headers=admin_auth_headers)
    assert response.status_code == 200

    missing = await client.get(f"/api/events/{event['id']}")
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_attendees_staff_only(
    client: AsyncClient, test_user, auth_headers, moderator_auth_headers, event_payload
):
    event = await create_event(client, auth_headers, event_payload())
    await client.post(f"/api/events/{event['id']}/rsvp", headers=auth_headers)

    forbidden = await client.get(f"/api/events/{event['id']}/attendees", headers=auth_headers)
    assert forbidden.status_code == 403

    response = await client.get(f"/api/events/{event['id']}/attendees", headers=moderator_auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_count"] == 1
    assert data["attendees"][0]["user"]["email"] == test_user.email
    assert data["attendees"][0]["user"]["graduation_year"] == test_user.graduation_year


@pytest.mark.asyncio
async def test_my_registrations(client: AsyncClient, auth_headers, other_auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload(title="Reunion 2025"))
    await client.post(f"/api/events/{event['id']}/rsvp", headers=other_auth_headers)

    response = await client.get("/api/events/my/registrations", headers=other_auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_count"] == 1
    assert data["registrations"][0]["event"]["title"] == "Reunion 2025"
    assert data["registrations"][0]["status"] == "registered"


@pytest.mark.asyncio
async def test_send_reminders(
    client: AsyncClient, notifier, create_user, make_headers, moderator_auth_headers, auth_headers, event_payload
):
    event = await create_event(client, auth_headers, event_payload(title="Gala"))
    opted_in = await create_user(phone="+252611111111")
    no_sms = await create_user(phone="+252622222222", sms_notifications=False)
    for user in (opted_in, no_sms):
        await client.post(f"/api/events/{event['id']}/rsvp", headers=make_headers(user))

    response = await client.post(
        f"/api/events/{event['id']}/send-reminders",
        json={"type": "both", "message": "See you there"},
        headers=moderator_auth_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Reminders sent successfully"
    assert data["results"]["email"] == {"successful": 2, "failed": 0}
    assert data["results"]["sms"] == {"successful": 1, "failed": 0}
    assert notifier.emails[0]["subject"] == "Reminder: Gala"
    assert notifier.sms[0]["phone_numbers"] == ["+252611111111"]


@pytest.mark.asyncio
async def test_send_reminders_skips_deactivated_attendees(
    client: AsyncClient, notifier, create_user, make_headers, moderator_auth_headers, auth_headers,
    event_payload, db_session
):
    event = await create_event(client, auth_headers, event_payload())
    staying = await create_user()
    leaving = await create_user()
    for user in (staying, leaving):
        await client.post(f"/api/events/{event['id']}/rsvp", headers=make_headers(user))

    leaving.is_active = False
    await db_session.commit()

    response = await client.post(
        f"/api/events/{event['id']}/send-reminders",
        json={"type": "email", "message": "See you there"},
        headers=moderator_auth_headers,
    )

    assert response.status_code == 200
    assert response.json()["results"]["email"] == {"successful": 1, "failed": 0}
    assert [r["email"] for r in notifier.emails[0]["recipients"]] == [staying.email]


@pytest.mark.asyncio
async def test_send_reminders_without_attendees(
    client: AsyncClient, auth_headers, moderator_auth_headers, event_payload
):
    event = await create_event(client, auth_headers, event_payload())

    response = await client.post(
        f"/api/events/{event['id']}/send-reminders",
        json={"type": "email", "message": "Hello"},
        headers=moderator_auth_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "No registered attendees to notify"


@pytest.mark.asyncio
async def test_send_reminders_staff_only(client: AsyncClient, auth_headers, event_payload):
    event = await create_event(client, auth_headers, event_payload())

    response = await client.post(
        f"/api/events/{event['id']}/send-reminders",
        json={"type": "email", "message": "Hello"},
        headers=auth_headers,
    )

    assert response.status_code == 403
