"""Create, list, reschedule and update per-platform scheduled posts."""
from datetime import datetime
from typing import Any

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.db_models import (
    SCHEDULED_MODELS,
    InvalidTransitionError,
    ScheduledJobMixin,
    ScheduledLinkedInPost,
    ScheduledTweet,
    ScheduledYoutubeVideo,
    User,
)
from app.models.schemas import (
    DispatchStatusUpdate,
    ScheduledLinkedInPostOut,
    ScheduledTweetOut,
    ScheduledYoutubeVideoOut,
    ScheduleLinkedInPostRequest,
    ScheduleTweetRequest,
    ScheduleYoutubeVideoRequest,
)
from app.services.dispatcher import ScheduleDispatcher
from app.utils.logging import get_logger

logger = get_logger(__name__)

OUT_SCHEMAS = {
    "linkedin": ScheduledLinkedInPostOut,
    "twitter": ScheduledTweetOut,
    "youtube": ScheduledYoutubeVideoOut,
}

# Lifecycle columns a reschedule must not copy to the replacement row
_LIFECYCLE_COLUMNS = {"id", "schedule_id", "scheduled_for", "status", "created_at", "updated_at"}


def model_for(platform: str) -> type[ScheduledJobMixin]:
    model = SCHEDULED_MODELS.get(platform)
    if model is None:
        raise HTTPException(status_code=404, detail=f"Unknown platform: {platform}")
    return model


class ScheduleService:
    """Scheduled posts owned by one user. Pass dispatcher=None when an external service dispatches."""

    def __init__(self, session: AsyncSession, user: User | None, dispatcher: ScheduleDispatcher | None = None):
        self.session = session
        self.user = user
        self.dispatcher = dispatcher

    async def schedule_linkedin_post(self, body: ScheduleLinkedInPostRequest) -> ScheduledLinkedInPost:
        row = ScheduledLinkedInPost(
            user_id=self.user.id,
            content=body.content,
            title=body.title,
            image_url=body.image_url,
            scheduled_for=body.scheduled_for,
            status="scheduled",
        )
        return await self._create("linkedin", row)

    async def schedule_tweet(self, body: ScheduleTweetRequest) -> ScheduledTweet:
        row = ScheduledTweet(
            user_id=self.user.id,
            content=body.content,
            scheduled_for=body.scheduled_for,
            status="scheduled",
        )
        return await self._create("twitter", row)

    async def schedule_youtube_video(self, body: ScheduleYoutubeVideoRequest) -> ScheduledYoutubeVideo:
        row = ScheduledYoutubeVideo(
            user_id=self.user.id,
            title=body.title,
            description=body.description,
            tags=body.tags,
            privacy_status=body.privacy_status,
            thumbnail_url=body.thumbnail_url,
            video_url=body.video_url,
            scheduled_for=body.scheduled_for,
            status="scheduled",
        )
        return await self._create("youtube", row)

    async def list_posts(self, platform: str, status: str | None = None, limit: int = 100) -> list[ScheduledJobMixin]:
        model = model_for(platform)
        query = select(model).where(model.user_id == self.user.id)
        if status:
            query = query.where(model.status == status)
        r = await self.session.execute(query.order_by(model.scheduled_for, model.id).limit(limit))
        return list(r.scalars().all())

    async def get_post(self, platform: str, row_id: int) -> ScheduledJobMixin:
        row = await self.session.get(model_for(platform), row_id)
        if not row or (self.user is not None and row.user_id != self.user.id):
            raise HTTPException(status_code=404, detail="Scheduled post not found")
        return row

    async def reschedule(self, platform: str, row_id: int, scheduled_for: datetime) -> ScheduledJobMixin:
        """
        scheduled_for never changes on a row: write a replacement row with a new
        schedule id and retire the old one as failed, pointing at its replacement.
        """
        old = await self.get_post(platform, row_id)
        if old.status != "scheduled":
            raise HTTPException(status_code=409, detail=f"Cannot reschedule a post that is {old.status}")
        skip = _LIFECYCLE_COLUMNS | {old.post_id_field, old.result_field}
        fields: dict[str, Any] = {
            col.key: getattr(old, col.key) for col in old.__table__.columns if col.key not in skip
        }
        replacement = type(old)(**fields, scheduled_for=scheduled_for, status="scheduled")
        self.session.add(replacement)
        await self.session.flush()
        old.transition("failed", result={"reason": "rescheduled", "replacedBy": replacement.id})
        old_schedule_id = old.schedule_id
        row = await self._create(platform, replacement)
        if self.dispatcher is not None:
            self.dispatcher.cancel(old_schedule_id)
        logger.info("post_rescheduled", platform=platform, old_id=old.id, new_id=row.id)
        return row

    async def apply_status(self, platform: str, row_id: int, update: DispatchStatusUpdate) -> ScheduledJobMixin:
        """Record an external dispatcher's outcome for a row."""
        row = await self.get_post(platform, row_id)
        try:
            row.transition(update.status, post_id=update.platform_post_id, result=update.result)
        except InvalidTransitionError as e:
            await self.session.rollback()
            raise HTTPException(status_code=409, detail=str(e)) from e
        await self.session.commit()
        logger.info("dispatch_status_recorded", platform=platform, row_id=row_id, status=row.status)
        return row

    async def _create(self, platform: str, row: ScheduledJobMixin) -> ScheduledJobMixin:
        """Insert the row, register its dispatch job and commit both or neither."""
        self.session.add(row)
        schedule_id = None
        try:
            await self.session.flush()
            if self.dispatcher is not None:
                schedule_id = self.dispatcher.schedule(platform, row.id, row.scheduled_for)
                row.schedule_id = schedule_id
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            if self.dispatcher is not None:
                self.dispatcher.cancel(schedule_id)
            logger.exception("schedule_create_failed", platform=platform, error=str(e))
            raise
        logger.info("post_scheduled", platform=platform, row_id=row.id, schedule_id=row.schedule_id,
                    scheduled_for=row.scheduled_for.isoformat())
        return row
