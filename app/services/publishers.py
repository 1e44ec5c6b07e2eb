"""Platform publishing calls made when a scheduled job fires (LinkedIn UGC, Twitter v2, YouTube Data API)."""
import asyncio
import io
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload, MediaIoBaseUpload

from app.config import settings
from app.models.db_models import (
    ScheduledLinkedInPost,
    ScheduledTweet,
    ScheduledYoutubeVideo,
    SocialAccount,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)

RESTLI_VERSION = "2.0.0"
VIDEO_TIMEOUT = httpx.Timeout(300.0, connect=10.0)
UPLOAD_CHUNK_SIZE = 10 * 1024 * 1024


class PublishError(Exception):
    """The platform rejected the post or could not be reached."""


@dataclass
class PublishResult:
    post_id: str
    payload: dict[str, Any] = field(default_factory=dict)
    url: str | None = None


def _raise_for_status(resp: httpx.Response, platform: str) -> None:
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning("publish_rejected", platform=platform, status=e.response.status_code, body=e.response.text[:500])
        raise PublishError(f"{platform} returned {e.response.status_code}: {e.response.text[:200]}") from e


def linkedin_author_urn(account: SocialAccount) -> str:
    account_id = account.platform_account_id
    return account_id if account_id.startswith("urn:") else f"urn:li:person:{account_id}"


def build_linkedin_share(author_urn: str, post: ScheduledLinkedInPost) -> dict[str, Any]:
    """UGC share body; an image URL is attached as an article with the title as its headline."""
    text = f"{post.title}\n\n{post.content}" if post.title else post.content
    share: dict[str, Any] = {
        "shareCommentary": {"text": text},
        "shareMediaCategory": "NONE",
    }
    if post.image_url:
        media: dict[str, Any] = {"status": "READY", "originalUrl": post.image_url}
        if post.title:
            media["title"] = {"text": post.title}
        share["shareMediaCategory"] = "ARTICLE"
        share["media"] = [media]
    return {
        "author": author_urn,
        "lifecycleState": "PUBLISHED",
        "specificContent": {"com.linkedin.ugc.ShareContent": share},
        "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
    }


async def publish_linkedin(account: SocialAccount, post: ScheduledLinkedInPost) -> PublishResult:
    body = build_linkedin_share(linkedin_author_urn(account), post)
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                f"{settings.linkedin_api_base}/v2/ugcPosts",
                json=body,
                headers={
                    "Authorization": f"Bearer {account.access_token}",
                    "Content-Type": "application/json",
                    "X-Restli-Protocol-Version": RESTLI_VERSION,
                },
            )
    except httpx.HTTPError as e:
        raise PublishError(f"LinkedIn unreachable: {e}") from e
    _raise_for_status(resp, "linkedin")
    post_id = resp.headers.get("X-RestLi-Id") or (resp.json() if resp.content else {}).get("id")
    if not post_id:
        raise PublishError("LinkedIn response carried no post id")
    return PublishResult(
        post_id=post_id,
        payload={"id": post_id, "status": resp.status_code},
        url=f"https://www.linkedin.com/feed/update/{post_id}",
    )


async def publish_tweet(account: SocialAccount, post: ScheduledTweet) -> PublishResult:
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.post(
                f"{settings.twitter_api_base}/2/tweets",
                json={"text": post.content},
                headers={"Authorization": f"Bearer {account.access_token}"},
            )
    except httpx.HTTPError as e:
        raise PublishError(f"Twitter unreachable: {e}") from e
    _raise_for_status(resp, "twitter")
    data = resp.json().get("data") or {}
    if not data.get("id"):
        raise PublishError("Twitter response carried no tweet id")
    return PublishResult(post_id=str(data["id"]), payload=data, url=f"https://twitter.com/i/web/status/{data['id']}")


def youtube_video_body(video: ScheduledYoutubeVideo) -> dict[str, Any]:
    """videos.insert metadata for a scheduled video."""
    return {
        "snippet": {
            "title": video.title[:100],
            "description": (video.description or "")[:5000],
            "tags": video.tags or [],
        },
        "status": {
            "privacyStatus": video.privacy_status,
            "selfDeclaredMadeForKids": False,
        },
    }


def _youtube_client(account: SocialAccount):
    creds = Credentials(
        token=account.access_token,
        refresh_token=account.refresh_token,
        token_uri=settings.google_token_uri,
    )
    return build("youtube", "v3", credentials=creds, cache_discovery=False)


async def _download(client: httpx.AsyncClient, url: str, dest: Path) -> str:
    """Stream url into dest and return its content type."""
    async with client.stream("GET", url) as resp:
        if resp.is_error:
            await resp.aread()
            _raise_for_status(resp, "video source")
        content_type = resp.headers.get("Content-Type", "video/*").split(";")[0]
        with dest.open("wb") as fh:
            async for chunk in resp.aiter_bytes():
                fh.write(chunk)
    return content_type


def _upload_video(account: SocialAccount, video: ScheduledYoutubeVideo, path: Path, mimetype: str,
                  thumbnail: tuple[bytes, str] | None) -> dict[str, Any]:
    """Resumable videos.insert, then thumbnails.set when a thumbnail was fetched. Blocking."""
    youtube = _youtube_client(account)
    media = MediaFileUpload(str(path), mimetype=mimetype, resumable=True, chunksize=UPLOAD_CHUNK_SIZE)
    request = youtube.videos().insert(part="snippet,status", body=youtube_video_body(video), media_body=media)
    response = None
    while response is None:
        status, response = request.next_chunk()
        if status:
            logger.info("youtube_upload_progress", row_id=video.id, percent=int(status.progress() * 100))

    if thumbnail is not None and response.get("id"):
        data, thumb_type = thumbnail
        try:
            youtube.thumbnails().set(
                videoId=response["id"],
                media_body=MediaIoBaseUpload(io.BytesIO(data), mimetype=thumb_type),
            ).execute()
        except HttpError as e:
            # A rejected thumbnail does not fail the post
            logger.warning("youtube_thumbnail_failed", video_id=response["id"], error=str(e))
    return response


async def publish_youtube(account: SocialAccount, video: ScheduledYoutubeVideo) -> PublishResult:
    with tempfile.TemporaryDirectory(prefix="bingo-yt-") as tmp:
        path = Path(tmp) / "video"
        thumbnail = None
        try:
            async with httpx.AsyncClient(timeout=VIDEO_TIMEOUT, follow_redirects=True) as client:
                content_type = await _download(client, video.video_url, path)
                if video.thumbnail_url:
                    thumb = await client.get(video.thumbnail_url)
                    if thumb.is_success:
                        thumbnail = (thumb.content, thumb.headers.get("Content-Type", "image/jpeg").split(";")[0])
                    else:
                        logger.warning("youtube_thumbnail_fetch_failed", row_id=video.id, status=thumb.status_code)
        except httpx.HTTPError as e:
            raise PublishError(f"YouTube upload failed: {e}") from e

        try:
            # googleapiclient is blocking; keep it off the event loop
            data = await asyncio.to_thread(_upload_video, account, video, path, content_type, thumbnail)
        except HttpError as e:
            raise PublishError(f"youtube returned {e.resp.status}: {e}") from e
    if not data.get("id"):
        raise PublishError("YouTube response carried no video id")
    return PublishResult(
        post_id=data["id"],
        payload={"id": data["id"], "status": data.get("status")},
        url=f"https://youtube.com/watch?v={data['id']}",
    )


Publisher = Callable[[SocialAccount, Any], Awaitable[PublishResult]]

PUBLISHERS: dict[str, Publisher] = {
    "linkedin": publish_linkedin,
    "twitter": publish_tweet,
    "youtube": publish_youtube,
}
