"""SQLAlchemy and Pydantic models."""
from app.models.db_models import (
    SCHEDULED_MODELS,
    Account,
    AuthSession,
    InvalidTransitionError,
    PublishedPost,
    ScheduledLinkedInPost,
    ScheduledTweet,
    ScheduledYoutubeVideo,
    SocialAccount,
    SocialContent,
    SocialContentHistory,
    SocialImage,
    User,
    Verification,
    init_db,
)
from app.models.schemas import (
    GenerateImageRequest,
    GenerateImageResponse,
    ScheduledLinkedInPostOut,
    ScheduledTweetOut,
    ScheduledYoutubeVideoOut,
    ScheduleLinkedInPostRequest,
)

__all__ = [
    "SCHEDULED_MODELS",
    "Account",
    "AuthSession",
    "InvalidTransitionError",
    "PublishedPost",
    "ScheduledLinkedInPost",
    "ScheduledTweet",
    "ScheduledYoutubeVideo",
    "SocialAccount",
    "SocialContent",
    "SocialContentHistory",
    "SocialImage",
    "User",
    "Verification",
    "init_db",
    "GenerateImageRequest",
    "GenerateImageResponse",
    "ScheduledLinkedInPostOut",
    "ScheduledTweetOut",
    "ScheduledYoutubeVideoOut",
    "ScheduleLinkedInPostRequest",
]
