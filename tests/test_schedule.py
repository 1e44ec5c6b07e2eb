"""Scheduling routes: create, list, reschedule and the dispatch status callback."""
from datetime import timedelta

from sqlalchemy import func, select

from app.config import settings
from app.models.db_models import ScheduledLinkedInPost
from app.utils.helpers import tomorrow_at_noon, utcnow


def _tomorrow_noon() -> str:
    return tomorrow_at_noon().isoformat()


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


async def test_schedule_linkedin_post_creates_scheduled_row(client, session_factory, dispatcher):
    resp = await client.post("/schedule/linkedin", json={"content": "Hello world", "scheduledFor": _tomorrow_noon()})

    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "scheduled"
    assert body["content"] == "Hello world"
    assert body["title"] is None
    assert body["imageUrl"] is None
    assert body["linkedinPostId"] is None
    assert body["scheduleId"] == f"job-linkedin-{body['id']}"
    assert dispatcher.scheduled[0][:2] == ("linkedin", body["id"])

    async with session_factory() as session:
        row = await session.get(ScheduledLinkedInPost, body["id"])
    assert row.status == "scheduled"
    assert row.user_id == "user-1"
    assert row.schedule_id == body["scheduleId"]


async def test_schedule_linkedin_post_blank_optional_fields_are_null(client):
    resp = await client.post(
        "/schedule/linkedin",
        json={"content": "Launch day", "title": "  ", "imageUrl": "", "scheduledFor": _tomorrow_noon()},
    )
    assert resp.status_code == 201
    assert resp.json()["title"] is None
    assert resp.json()["imageUrl"] is None


async def test_schedule_linkedin_post_keeps_title_and_image(client):
    resp = await client.post(
        "/schedule/linkedin",
        json={
            "content": "Launch day",
            "title": "We shipped",
            "imageUrl": "https://example.com/launch.png",
            "scheduledFor": _tomorrow_noon(),
        },
    )
    assert resp.status_code == 201
    assert resp.json()["title"] == "We shipped"
    assert resp.json()["imageUrl"] == "https://example.com/launch.png"


async def test_schedule_rejects_past_time(client, session_factory):
    past = (utcnow() - timedelta(minutes=5)).isoformat()
    resp = await client.post("/schedule/linkedin", json={"content": "Too late", "scheduledFor": past})

    assert resp.status_code == 422
    assert await _count(session_factory, ScheduledLinkedInPost) == 0


async def test_schedule_rejects_empty_content(client, session_factory):
    resp = await client.post("/schedule/linkedin", json={"content": "   ", "scheduledFor": _tomorrow_noon()})

    assert resp.status_code == 422
    assert await _count(session_factory, ScheduledLinkedInPost) == 0


async def test_schedule_requires_auth(client):
    resp = await client.post(
        "/schedule/linkedin",
        json={"content": "Hello world", "scheduledFor": _tomorrow_noon()},
        headers={"Authorization": "Bearer nope"},
    )
    assert resp.status_code == 401


async def test_schedule_tweet_enforces_length(client):
    resp = await client.post("/schedule/twitter", json={"content": "x" * 281, "scheduledFor": _tomorrow_noon()})
    assert resp.status_code == 422

    resp = await client.post("/schedule/twitter", json={"content": "short and sweet", "scheduledFor": _tomorrow_noon()})
    assert resp.status_code == 201
    assert resp.json()["tweetId"] is None


async def test_schedule_youtube_video(client):
    resp = await client.post(
        "/schedule/youtube",
        json={
            "title": "Demo",
            "description": "Product walkthrough",
            "tags": ["demo", "product"],
            "videoUrl": "https://cdn.example.com/demo.mp4",
            "scheduledFor": _tomorrow_noon(),
        },
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["privacyStatus"] == "private"
    assert body["tags"] == ["demo", "product"]
    assert body["youtubeId"] is None


async def test_list_and_get_scheduled(client):
    first = (await client.post("/schedule/linkedin", json={"content": "one", "scheduledFor": _tomorrow_noon()})).json()
    later = (tomorrow_at_noon() + timedelta(days=2)).isoformat()
    await client.post("/schedule/linkedin", json={"content": "two", "scheduledFor": later})

    resp = await client.get("/schedule/linkedin")
    assert resp.status_code == 200
    assert [r["content"] for r in resp.json()] == ["one", "two"]

    resp = await client.get(f"/schedule/linkedin/{first['id']}")
    assert resp.status_code == 200
    assert resp.json()["content"] == "one"

    assert (await client.get("/schedule/linkedin/999")).status_code == 404
    assert (await client.get("/schedule/mastodon")).status_code == 404


async def test_reschedule_replaces_row(client, session_factory, dispatcher):
    old = (await client.post("/schedule/linkedin", json={"content": "Moved", "scheduledFor": _tomorrow_noon()})).json()
    new_time = (tomorrow_at_noon() + timedelta(days=3)).isoformat()

    resp = await client.post(f"/schedule/linkedin/{old['id']}/reschedule", json={"scheduledFor": new_time})

    assert resp.status_code == 201
    new = resp.json()
    assert new["id"] != old["id"]
    assert new["content"] == "Moved"
    assert new["status"] == "scheduled"
    assert new["scheduleId"] != old["scheduleId"]
    assert dispatcher.cancelled == [old["scheduleId"]]

    async with session_factory() as session:
        retired = await session.get(ScheduledLinkedInPost, old["id"])
    assert retired.status == "failed"
    assert retired.post_result == {"reason": "rescheduled", "replacedBy": new["id"]}

    again = await client.post(f"/schedule/linkedin/{old['id']}/reschedule", json={"scheduledFor": new_time})
    assert again.status_code == 409


async def test_status_callback_walks_lifecycle(client, monkeypatch):
    monkeypatch.setattr(settings, "dispatch_token", "s3cret")
    client.headers["X-Dispatch-Token"] = "s3cret"
    row = (await client.post("/schedule/linkedin", json={"content": "Hi", "scheduledFor": _tomorrow_noon()})).json()
    url = f"/schedule/linkedin/{row['id']}/status"

    # completed straight from scheduled is not allowed
    assert (await client.post(url, json={"status": "completed", "platformPostId": "urn:li:share:1"})).status_code == 409

    resp = await client.post(url, json={"status": "processing"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "processing"

    # completed needs the platform id
    assert (await client.post(url, json={"status": "completed"})).status_code == 409

    resp = await client.post(url, json={"status": "completed", "platformPostId": "urn:li:share:1", "result": {"ok": True}})
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"
    assert resp.json()["linkedinPostId"] == "urn:li:share:1"
    assert resp.json()["postResult"] == {"ok": True}

    assert (await client.post(url, json={"status": "failed"})).status_code == 409


async def test_status_callback_checks_dispatch_token(client, monkeypatch):
    monkeypatch.setattr(settings, "dispatch_token", "s3cret")
    row = (await client.post("/schedule/twitter", json={"content": "Hi", "scheduledFor": _tomorrow_noon()})).json()
    url = f"/schedule/twitter/{row['id']}/status"

    assert (await client.post(url, json={"status": "processing"})).status_code == 403
    resp = await client.post(url, json={"status": "processing"}, headers={"X-Dispatch-Token": "s3cret"})
    assert resp.status_code == 200


async def test_status_callback_closed_without_configured_token(client, session_factory, monkeypatch):
    monkeypatch.setattr(settings, "dispatch_token", "")
    row = (await client.post("/schedule/linkedin", json={"content": "Hi", "scheduledFor": _tomorrow_noon()})).json()
    url = f"/schedule/linkedin/{row['id']}/status"

    resp = await client.post(url, json={"status": "failed"}, headers={"Authorization": ""})
    assert resp.status_code == 403
    resp = await client.post(url, json={"status": "failed"}, headers={"X-Dispatch-Token": ""})
    assert resp.status_code == 403

    async with session_factory() as session:
        assert (await session.get(ScheduledLinkedInPost, row["id"])).status == "scheduled"
