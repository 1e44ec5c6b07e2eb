"""Platform request bodies and response handling, against a mocked transport."""
import json
from datetime import timedelta
from types import SimpleNamespace

import httpx
import pytest
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from app.models.db_models import ScheduledLinkedInPost, ScheduledTweet, ScheduledYoutubeVideo, SocialAccount
from app.services.publishers import (
    PublishError,
    build_linkedin_share,
    linkedin_author_urn,
    publish_linkedin,
    publish_tweet,
    publish_youtube,
    youtube_video_body,
)
from app.utils.helpers import utcnow

WHEN = utcnow() + timedelta(days=1)


def _account(platform: str, account_id: str = "abc123") -> SocialAccount:
    return SocialAccount(user_id="user-1", platform=platform, platform_account_id=account_id, access_token="tok")


@pytest.fixture
def mock_http(monkeypatch):
    """Route every httpx.AsyncClient made by the publishers through a handler set by the test."""
    state = {"handler": None, "requests": []}
    real_client = httpx.AsyncClient

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return state["handler"](request)

    def make_client(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr("app.services.publishers.httpx.AsyncClient", make_client)
    return state


def test_linkedin_author_urn():
    assert linkedin_author_urn(_account("linkedin")) == "urn:li:person:abc123"
    assert linkedin_author_urn(_account("linkedin", "urn:li:organization:9")) == "urn:li:organization:9"


def test_linkedin_share_plain_text():
    post = ScheduledLinkedInPost(user_id="user-1", content="Hello world", scheduled_for=WHEN)
    body = build_linkedin_share("urn:li:person:abc123", post)

    share = body["specificContent"]["com.linkedin.ugc.ShareContent"]
    assert share == {"shareCommentary": {"text": "Hello world"}, "shareMediaCategory": "NONE"}
    assert body["lifecycleState"] == "PUBLISHED"


def test_linkedin_share_with_title_and_image():
    post = ScheduledLinkedInPost(
        user_id="user-1", content="Hello world", title="News", image_url="https://example.com/a.png", scheduled_for=WHEN
    )
    share = build_linkedin_share("urn:li:person:abc123", post)["specificContent"]["com.linkedin.ugc.ShareContent"]

    assert share["shareCommentary"]["text"] == "News\n\nHello world"
    assert share["shareMediaCategory"] == "ARTICLE"
    assert share["media"] == [{"status": "READY", "originalUrl": "https://example.com/a.png", "title": {"text": "News"}}]


def test_youtube_video_body():
    video = ScheduledYoutubeVideo(
        user_id="user-1", title="Demo" * 40, tags=["a"], privacy_status="unlisted",
        video_url="https://cdn.example.com/v.mp4", scheduled_for=WHEN,
    )
    body = youtube_video_body(video)

    assert len(body["snippet"]["title"]) == 100
    assert body["snippet"]["description"] == ""
    assert body["snippet"]["tags"] == ["a"]
    assert body["status"] == {"privacyStatus": "unlisted", "selfDeclaredMadeForKids": False}


async def test_publish_linkedin_reads_restli_id(mock_http):
    mock_http["handler"] = lambda r: httpx.Response(201, headers={"X-RestLi-Id": "urn:li:share:42"})
    post = ScheduledLinkedInPost(user_id="user-1", content="Hello", scheduled_for=WHEN)

    result = await publish_linkedin(_account("linkedin"), post)

    assert result.post_id == "urn:li:share:42"
    sent = mock_http["requests"][0]
    assert sent.url.path == "/v2/ugcPosts"
    assert sent.headers["Authorization"] == "Bearer tok"
    assert sent.headers["X-Restli-Protocol-Version"] == "2.0.0"


async def test_publish_tweet(mock_http):
    mock_http["handler"] = lambda r: httpx.Response(201, json={"data": {"id": "1789", "text": "hi"}})
    tweet = ScheduledTweet(user_id="user-1", content="hi", scheduled_for=WHEN)

    result = await publish_tweet(_account("twitter"), tweet)

    assert result.post_id == "1789"
    assert result.url == "https://twitter.com/i/web/status/1789"
    assert json.loads(mock_http["requests"][0].content) == {"text": "hi"}


async def test_publish_tweet_rejected(mock_http):
    mock_http["handler"] = lambda r: httpx.Response(403, json={"detail": "Forbidden"})
    tweet = ScheduledTweet(user_id="user-1", content="hi", scheduled_for=WHEN)

    with pytest.raises(PublishError, match="twitter returned 403"):
        await publish_tweet(_account("twitter"), tweet)


class FakeYoutube:
    """Records videos.insert and thumbnails.set calls the way googleapiclient would receive them."""

    def __init__(self, insert_error=None):
        self.inserts = []
        self.thumbnails_set = []
        self.insert_error = insert_error

    def videos(self):
        return SimpleNamespace(insert=self._insert)

    def thumbnails(self):
        return SimpleNamespace(set=self._set_thumbnail)

    def _insert(self, part, body, media_body):
        self.inserts.append({"part": part, "body": body, "media": media_body, "size": media_body.size()})
        chunks = [(SimpleNamespace(progress=lambda: 0.5), None), (None, {"id": "vid123", "status": {"uploadStatus": "uploaded"}})]
        error = self.insert_error

        def next_chunk():
            if error is not None:
                raise error
            return chunks.pop(0)

        return SimpleNamespace(next_chunk=next_chunk)

    def _set_thumbnail(self, videoId, media_body):
        self.thumbnails_set.append({"videoId": videoId, "mimetype": media_body.mimetype()})
        return SimpleNamespace(execute=lambda: {})


@pytest.fixture
def fake_youtube(monkeypatch):
    youtube = FakeYoutube()
    monkeypatch.setattr("app.services.publishers.build", lambda *args, **kwargs: youtube)
    return youtube


def _video(**kwargs) -> ScheduledYoutubeVideo:
    return ScheduledYoutubeVideo(
        id=7, user_id="user-1", title="Demo", privacy_status="private",
        video_url="https://cdn.example.com/v.mp4", scheduled_for=WHEN, **kwargs,
    )


async def test_publish_youtube_streams_then_uploads(mock_http, fake_youtube):
    mock_http["handler"] = lambda r: httpx.Response(200, content=b"VIDEO", headers={"Content-Type": "video/mp4"})

    result = await publish_youtube(_account("youtube"), _video())

    assert result.post_id == "vid123"
    assert result.url == "https://youtube.com/watch?v=vid123"
    insert = fake_youtube.inserts[0]
    assert insert["part"] == "snippet,status"
    assert insert["body"]["snippet"]["title"] == "Demo"
    assert isinstance(insert["media"], MediaFileUpload)
    assert insert["media"].resumable()
    assert insert["media"].mimetype() == "video/mp4"
    assert insert["size"] == len(b"VIDEO")
    assert fake_youtube.thumbnails_set == []


async def test_publish_youtube_sets_stored_thumbnail(mock_http, fake_youtube):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith(".png"):
            return httpx.Response(200, content=b"PNG", headers={"Content-Type": "image/png"})
        return httpx.Response(200, content=b"VIDEO", headers={"Content-Type": "video/mp4"})

    mock_http["handler"] = handler

    await publish_youtube(_account("youtube"), _video(thumbnail_url="https://cdn.example.com/thumb.png"))

    assert fake_youtube.thumbnails_set == [{"videoId": "vid123", "mimetype": "image/png"}]


async def test_publish_youtube_source_missing(mock_http, fake_youtube):
    mock_http["handler"] = lambda r: httpx.Response(404, text="gone")

    with pytest.raises(PublishError, match="video source returned 404"):
        await publish_youtube(_account("youtube"), _video())
    assert fake_youtube.inserts == []


async def test_publish_youtube_api_rejection(mock_http, monkeypatch):
    mock_http["handler"] = lambda r: httpx.Response(200, content=b"VIDEO", headers={"Content-Type": "video/mp4"})
    youtube = FakeYoutube(insert_error=HttpError(SimpleNamespace(status=403, reason="Forbidden"), b"quotaExceeded"))
    monkeypatch.setattr("app.services.publishers.build", lambda *args, **kwargs: youtube)

    with pytest.raises(PublishError, match="youtube returned 403"):
        await publish_youtube(_account("youtube"), _video())
