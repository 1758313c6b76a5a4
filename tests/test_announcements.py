from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from alumni_api.models.user import UserRole


async def create_announcement(client: AsyncClient, headers: dict, payload: dict) -> dict:
    response = await client.post("/api/announcements", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["announcement"]


@pytest.mark.asyncio
async def test_create_announcement_staff_only(
    client: AsyncClient, auth_headers, moderator_auth_headers, announcement_payload
):
    forbidden = await client.post("/api/announcements", json=announcement_payload(), headers=auth_headers)
    assert forbidden.status_code == 403

    response = await client.post(
        "/api/announcements",
        json=announcement_payload(target_audience={"graduation_years": [2010], "roles": ["alumni"]}),
        headers=moderator_auth_headers,
    )
    assert response.status_code == 201
    announcement = response.json()["announcement"]
    assert announcement["status"] == "published"
    assert announcement["target_audience"] == {
        "is_public": True, "graduation_years": [2010], "roles": ["alumni"]
    }


@pytest.mark.asyncio
async def test_list_announcements(client: AsyncClient, moderator_auth_headers, announcement_payload):
    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    await create_announcement(client, moderator_auth_headers, announcement_payload(title="Regular"))
    await create_announcement(client, moderator_auth_headers, announcement_payload(title="Pinned", is_pinned=True))
    await create_announcement(client, moderator_auth_headers, announcement_payload(title="Draft", status="draft"))
    await create_announcement(client, moderator_auth_headers, announcement_payload(title="Expired", expiry_date=past))
    await create_announcement(
        client, moderator_auth_headers, announcement_payload(title="Scholarship", category="scholarships")
    )

    response = await client.get("/api/announcements")
    assert response.status_code == 200
    titles = [a["title"] for a in response.json()["items"]]
    assert titles[0] == "Pinned"
    assert set(titles) == {"Pinned", "Regular", "Scholarship"}

    by_category = await client.get("/api/announcements", params={"category": "scholarships"})
    assert [a["title"] for a in by_category.json()["items"]] == ["Scholarship"]


@pytest.mark.asyncio
async def test_get_announcement_counts_views(client: AsyncClient, moderator_auth_headers, announcement_payload):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())

    await client.get(f"/api/announcements/{announcement['id']}")
    response = await client.get(f"/api/announcements/{announcement['id']}")

    assert response.status_code == 200
    assert response.json()["views"] == 2
    assert response.json()["comments"] == []


@pytest.mark.asyncio
async def test_unpublished_announcement_admin_only(
    client: AsyncClient, auth_headers, admin_auth_headers, moderator_auth_headers, announcement_payload
):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload(status="draft"))

    member = await client.get(f"/api/announcements/{announcement['id']}", headers=auth_headers)
    admin = await client.get(f"/api/announcements/{announcement['id']}", headers=admin_auth_headers)

    assert member.status_code == 403
    assert admin.status_code == 200


@pytest.mark.asyncio
async def test_like_toggle_restores_count(
    client: AsyncClient, auth_headers, moderator_auth_headers, announcement_payload
):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())
    url = f"/api/announcements/{announcement['id']}/like"

    liked = await client.post(url, headers=auth_headers)
    assert liked.json() == {"message": "Announcement liked", "liked": True, "like_count": 1}

    unliked = await client.post(url, headers=auth_headers)
    assert unliked.json() == {"message": "Announcement unliked", "liked": False, "like_count": 0}


@pytest.mark.asyncio
async def test_comments_and_replies(
    client: AsyncClient, test_user, auth_headers, other_auth_headers, moderator_auth_headers, announcement_payload
):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())
    base = f"/api/announcements/{announcement['id']}"

    comment = await client.post(f"{base}/comments", json={"content": "Congrats!"}, headers=auth_headers)
    assert comment.status_code == 201
    comment_id = comment.json()["comment"]["id"]
    assert comment.json()["comment"]["user"]["id"] == str(test_user.id)

    reply = await client.post(
        f"{base}/comments/{comment_id}/replies", json={"content": "Thanks"}, headers=other_auth_headers
    )
    assert reply.status_code == 201
    assert reply.json()["reply"]["content"] == "Thanks"

    detail = await client.get(base)
    comments = detail.json()["comments"]
    assert detail.json()["comment_count"] == 1
    assert comments[0]["replies"][0]["content"] == "Thanks"


@pytest.mark.asyncio
async def test_empty_comment_rejected(client: AsyncClient, auth_headers, moderator_auth_headers, announcement_payload):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())

    response = await client.post(
        f"/api/announcements/{announcement['id']}/comments", json={"content": "   "}, headers=auth_headers
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_reply_to_unknown_comment(
    client: AsyncClient, auth_headers, moderator_auth_headers, announcement_payload
):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())

    response = await client.post(
        f"/api/announcements/{announcement['id']}/comments/00000000-0000-0000-0000-000000000000/replies",
        json={"content": "Hello"},
        headers=auth_headers,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Comment not found"


@pytest.mark.asyncio
async def test_delete_comment_author_or_admin(
    client: AsyncClient, auth_headers, other_auth_headers, admin_auth_headers,
    moderator_auth_headers, announcement_payload
):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())
    base = f"/api/announcements/{announcement['id']}"
    first = (await client.post(f"{base}/comments", json={"content": "One"}, headers=auth_headers)).json()
    second = (await client.post(f"{base}/comments", json={"content": "Two"}, headers=auth_headers)).json()

    forbidden = await client.delete(f"{base}/comments/{first['comment']['id']}", headers=other_auth_headers)
    assert forbidden.status_code == 403

    own = await client.delete(f"{base}/comments/{first['comment']['id']}", headers=auth_headers)
    admin = await client.delete(f"{base}/comments/{second['comment']['id']}", headers=admin_auth_headers)
    assert own.status_code == 200
    assert admin.status_code == 200

    detail = await client.get(base)
    assert detail.json()["comment_count"] == 0


@pytest.mark.asyncio
async def test_delete_reply(
    client: AsyncClient, auth_headers, other_auth_headers, moderator_auth_headers, announcement_payload
):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())
    base = f"/api/announcements/{announcement['id']}"
    comment_id = (await client.post(f"{base}/comments", json={"content": "Hi"}, headers=auth_headers)).json()[
        "comment"]["id"]
    reply_id = (await client.post(
        f"{base}/comments/{comment_id}/replies", json={"content": "Hey"}, headers=other_auth_headers
    )).json()["reply"]["id"]

    forbidden = await client.delete(f"{base}/comments/{comment_id}/replies/{reply_id}", headers=auth_headers)
    assert forbidden.status_code == 403

    response = await client.delete(f"{base}/comments/{comment_id}/replies/{reply_id}", headers=other_auth_headers)
    assert response.status_code == 200

    detail = await client.get(base)
    assert detail.json()["comments"][0]["replies"] == []


@pytest.mark.asyncio
async def test_update_announcement_ownership(
    client: AsyncClient, create_user, make_headers, moderator_auth_headers, admin_auth_headers, announcement_payload
):
    announcement = await create_announcement(client, moderator_auth_headers, announcement_payload())
    other_moderator = make_headers(await create_user(role=UserRole.MODERATOR))
    url = f"/api/announcements/{announcement['id']}"

    forbidden = await client.put(url, json={"priority": "not-a-priority"}, headers=other_moderator)
    assert forbidden.status_code == 403

    invalid = await client.put(url, json={"priority": "not-a-priority"}, headers=moderator_auth_headers)
    assert invalid.status_code == 400
    assert invalid.json()["errors"][0]["field"] == "priority"

    updated = await client.put(
        url, json={"is_pinned": True, "target_audience": {"graduation_years": [2001]}}, headers=admin_auth_headers
    )
    assert updated.status_code == 200
    data = updated.json()["announcement"]
    assert data["is_pinned"] is True
    assert data["target_audience"]["graduation_years"] == [2001]
    assert data["title"] == announcement["title"]

    deleted = await client.delete(url, headers=moderator_auth_headers)
    assert deleted.status_code == 200
    assert (await client.get(url)).status_code == 404
