"""POST/GET /schedule/{platform}: scheduled posts, reschedule, and the dispatch status callback."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.deps import get_current_user, verify_dispatch_token
from app.models.db_models import User
from app.models.schemas import (
    DispatchStatusUpdate,
    RescheduleRequest,
    ScheduledLinkedInPostOut,
    ScheduledTweetOut,
    ScheduledYoutubeVideoOut,
    ScheduleLinkedInPostRequest,
    ScheduleStatus,
    ScheduleTweetRequest,
    ScheduleYoutubeVideoRequest,
)
from app.services.dispatcher import ScheduleDispatcher, get_dispatcher
from app.services.schedule_service import OUT_SCHEMAS, ScheduleService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/schedule", tags=["schedule"])

ScheduledPostOut = ScheduledLinkedInPostOut | ScheduledTweetOut | ScheduledYoutubeVideoOut


def _service(
    session: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    dispatcher: ScheduleDispatcher | None = Depends(get_dispatcher),
) -> ScheduleService:
    return ScheduleService(session, user, dispatcher)


def _out(platform: str, row) -> ScheduledPostOut:
    return OUT_SCHEMAS[platform].model_validate(row)


async def _create(coro, platform: str):
    try:
        row = await coro
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to schedule {platform} post") from e
    return _out(platform, row)


@router.post("/linkedin", response_model=ScheduledLinkedInPostOut, status_code=201)
async def schedule_linkedin_post(body: ScheduleLinkedInPostRequest, service: ScheduleService = Depends(_service)):
    """Schedule a LinkedIn post for a future time."""
    return await _create(service.schedule_linkedin_post(body), "linkedin")


@router.post("/twitter", response_model=ScheduledTweetOut, status_code=201)
async def schedule_tweet(body: ScheduleTweetRequest, service: ScheduleService = Depends(_service)):
    return await _create(service.schedule_tweet(body), "twitter")


@router.post("/youtube", response_model=ScheduledYoutubeVideoOut, status_code=201)
async def schedule_youtube_video(body: ScheduleYoutubeVideoRequest, service: ScheduleService = Depends(_service)):
    return await _create(service.schedule_youtube_video(body), "youtube")


@router.get("/{platform}", response_model=list[ScheduledPostOut])
async def list_scheduled(
    platform: str,
    status: ScheduleStatus | None = None,
    limit: int = 100,
    service: ScheduleService = Depends(_service),
):
    """List the caller's scheduled rows for a platform, soonest first."""
    rows = await service.list_posts(platform, status=status, limit=limit)
    return [_out(platform, r) for r in rows]


@router.get("/{platform}/{row_id}", response_model=ScheduledPostOut)
async def get_scheduled(platform: str, row_id: int, service: ScheduleService = Depends(_service)):
    return _out(platform, await service.get_post(platform, row_id))


@router.post("/{platform}/{row_id}/reschedule", response_model=ScheduledPostOut, status_code=201)
async def reschedule(
    platform: str,
    row_id: int,
    body: RescheduleRequest,
    service: ScheduleService = Depends(_service),
):
    """Move a still-pending post to a new time. Returns the replacement row."""
    return await _create(service.reschedule(platform, row_id, body.scheduled_for), platform)


@router.post("/{platform}/{row_id}/status", response_model=ScheduledPostOut, dependencies=[Depends(verify_dispatch_token)])
async def record_dispatch_status(
    platform: str,
    row_id: int,
    body: DispatchStatusUpdate,
    session: AsyncSession = Depends(get_db),
):
    """Callback for an external dispatcher: processing, then completed (with post id) or failed."""
    service = ScheduleService(session, user=None)
    return _out(platform, await service.apply_status(platform, row_id, body))
