"""Social content drafts: CRUD, AI revision, revision history, engagement."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import get_db
from app.deps import get_current_user
from app.models.db_models import User
from app.models.schemas import (
    ContentCreate,
    ContentHistoryOut,
    ContentOut,
    ContentReviseRequest,
    ContentStatus,
    ContentUpdate,
    EngagementUpdate,
    SocialPlatform,
)
from app.services.content_service import ContentRevisionError, ContentService
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/content", tags=["content"])


def _service(session: AsyncSession = Depends(get_db), user: User = Depends(get_current_user)) -> ContentService:
    return ContentService(session, user)


@router.post("", response_model=ContentOut, status_code=201)
async def create_content(body: ContentCreate, service: ContentService = Depends(_service)):
    return await service.create(body)


@router.get("", response_model=list[ContentOut])
async def list_content(
    platform: SocialPlatform | None = None,
    status: ContentStatus | None = None,
    limit: int = 50,
    service: ContentService = Depends(_service),
):
    return await service.list_content(platform=platform, status=status, limit=limit)


@router.get("/{content_id}", response_model=ContentOut)
async def get_content(content_id: int, service: ContentService = Depends(_service)):
    return await service.get(content_id)


@router.patch("/{content_id}", response_model=ContentOut)
async def update_content(content_id: int, body: ContentUpdate, service: ContentService = Depends(_service)):
    """Edit text, status or image; a text change is logged as a manual revision."""
    return await service.update(content_id, body)


@router.post("/{content_id}/revise", response_model=ContentOut)
async def revise_content(content_id: int, body: ContentReviseRequest, service: ContentService = Depends(_service)):
    """Rewrite the post with Gemini following the instruction."""
    try:
        return await service.revise(content_id, body.instruction)
    except HTTPException:
        raise
    except ContentRevisionError as e:
        await service.session.rollback()
        logger.warning("revise_content_empty", content_id=content_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to revise content") from e
    except Exception as e:
        await service.session.rollback()
        logger.exception("revise_content_failed", content_id=content_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to revise content") from e


@router.get("/{content_id}/history", response_model=list[ContentHistoryOut])
async def content_history(content_id: int, service: ContentService = Depends(_service)):
    return await service.history(content_id)


@router.put("/{content_id}/engagement", response_model=ContentOut)
async def set_engagement(content_id: int, body: EngagementUpdate, service: ContentService = Depends(_service)):
    return await service.set_engagement(content_id, body.metrics)
