"""Pydantic schemas for the API. Fields are camelCase on the wire."""
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.utils.helpers import as_utc, utcnow

SocialPlatform = Literal["twitter", "linkedin", "facebook", "instagram"]
ImageSize = Literal["square", "portrait", "landscape", "twitter"]
ContentStatus = Literal["draft", "scheduled", "published"]
ScheduleStatus = Literal["scheduled", "processing", "completed", "failed"]
AccountPlatform = Literal["twitter", "linkedin", "youtube", "facebook", "instagram"]

LINKEDIN_MAX_CHARS = 3000
TWEET_MAX_CHARS = 280


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


def _required_text(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be empty")
    return value


def _blank_to_none(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value


def _future_utc(value: datetime) -> datetime:
    value = as_utc(value)
    if value <= utcnow():
        raise ValueError("must be in the future")
    return value


# ----- Scheduling -----
class ScheduleLinkedInPostRequest(ApiModel):
    """Request body for POST /schedule/linkedin."""

    content: str = Field(max_length=LINKEDIN_MAX_CHARS)
    title: str | None = Field(default=None, max_length=300)
    image_url: str | None = Field(default=None, description="Optional image attached as an article share")
    scheduled_for: datetime = Field(description="When to publish; naive values are UTC")

    check_content = field_validator("content")(_required_text)
    check_optional = field_validator("title", "image_url")(_blank_to_none)
    check_when = field_validator("scheduled_for")(_future_utc)


class ScheduleTweetRequest(ApiModel):
    content: str = Field(max_length=TWEET_MAX_CHARS)
    scheduled_for: datetime

    check_content = field_validator("content")(_required_text)
    check_when = field_validator("scheduled_for")(_future_utc)


class ScheduleYoutubeVideoRequest(ApiModel):
    title: str = Field(max_length=256)
    description: str | None = None
    tags: list[str] | None = None
    privacy_status: Literal["private", "public", "unlisted"] = "private"
    thumbnail_url: str | None = None
    video_url: str = Field(description="Where the dispatcher downloads the video from")
    scheduled_for: datetime

    check_required = field_validator("title", "video_url")(_required_text)
    check_when = field_validator("scheduled_for")(_future_utc)


class RescheduleRequest(ApiModel):
    scheduled_for: datetime

    check_when = field_validator("scheduled_for")(_future_utc)


class DispatchStatusUpdate(ApiModel):
    """Callback body sent by an external dispatcher when a job runs."""

    status: Literal["processing", "completed", "failed"]
    platform_post_id: str | None = None
    result: dict[str, Any] | None = None


class ScheduledPostBase(ApiModel):
    id: int
    user_id: str
    schedule_id: str | None
    scheduled_for: datetime
    status: ScheduleStatus
    created_at: datetime
    updated_at: datetime | None = None


class ScheduledLinkedInPostOut(ScheduledPostBase):
    content: str
    title: str | None
    image_url: str | None
    linkedin_post_id: str | None
    post_result: dict[str, Any] | None


class ScheduledTweetOut(ScheduledPostBase):
    content: str
    tweet_id: str | None
    post_result: dict[str, Any] | None


class ScheduledYoutubeVideoOut(ScheduledPostBase):
    title: str
    description: str | None
    tags: list[str] | None
    privacy_status: str
    thumbnail_url: str | None
    video_url: str
    youtube_id: str | None
    upload_result: dict[str, Any] | None


# ----- Images -----
class GenerateImageRequest(ApiModel):
    """Request body for POST /images/generate."""

    platform: SocialPlatform
    prompt: str = Field(min_length=1)
    size: ImageSize = "square"
    style: str | None = Field(default=None, max_length=100)
    content_id: int | None = Field(default=None, description="Optional reference to existing content")

    check_prompt = field_validator("prompt")(_required_text)


class GenerateImageResponse(ApiModel):
    image_base64: str
    mime_type: str
    alt_text: str
    image_id: int


class SocialImageOut(ApiModel):
    """Stored image metadata; the payload is fetched via /images/{id}/raw."""

    id: int
    content_id: int | None
    mime_type: str
    alt_text: str | None
    size: str
    prompt: str | None
    style: str | None
    model_used: str
    created_at: datetime


class SocialImageDetail(SocialImageOut):
    image_url: str
    image_base64: str


# ----- Content -----
class ContentCreate(ApiModel):
    platform: SocialPlatform
    content: str
    image_url: str | None = None
    image_alt_text: str | None = None

    check_content = field_validator("content")(_required_text)


class ContentUpdate(ApiModel):
    """PATCH body; only provided fields change."""

    content: str | None = None
    status: ContentStatus | None = None
    image_url: str | None = None
    image_alt_text: str | None = None
    scheduled_for: datetime | None = None


class ContentReviseRequest(ApiModel):
    instruction: str = Field(min_length=1, description="How the model should rewrite the post")

    check_instruction = field_validator("instruction")(_required_text)


class EngagementUpdate(ApiModel):
    metrics: dict[str, Any]


class ContentOut(ApiModel):
    id: int
    platform: str
    content: str
    image_url: str | None
    image_alt_text: str | None
    status: ContentStatus
    scheduled_for: datetime | None
    published_at: datetime | None
    engagement: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime | None


class ContentHistoryOut(ApiModel):
    id: int
    content_id: int
    previous_content: str
    updated_content: str
    update_prompt: str | None
    model_used: str
    created_by: str
    created_at: datetime


# ----- Accounts -----
class SocialAccountUpsert(ApiModel):
    platform_account_id: str
    access_token: str
    refresh_token: str | None = None
    token_expires_at: datetime | None = None
    profile_name: str | None = None
    profile_image: str | None = None

    check_required = field_validator("platform_account_id", "access_token")(_required_text)


class SocialAccountOut(ApiModel):
    """Linked account for selectors; tokens are never returned."""

    id: int
    platform: str
    platform_account_id: str
    profile_name: str | None
    profile_image: str | None
    is_active: bool
    token_expires_at: datetime | None
    created_at: datetime


# ----- Published -----
class PublishedPostOut(ApiModel):
    id: int
    platform: str
    platform_post_id: str
    scheduled_row_id: int | None
    text: str | None
    url: str | None
    result: dict[str, Any] | None
    published_at: datetime
